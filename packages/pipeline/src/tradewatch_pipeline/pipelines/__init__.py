"""
tradewatch_pipeline.pipelines — End-to-end orchestrators.

Each pipeline module exports a run() async function.

    from tradewatch_pipeline.pipelines import trade_report

    report = await trade_report.run("72085200", country_year=2024)
"""
