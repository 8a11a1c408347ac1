"""
tradewatch_pipeline — Brazilian foreign-trade analysis for a single NCM code.

Architecture:
  sources/     — ComexStat API adapter and Excel workbook readers
  transforms/  — annual aggregation, year-over-year summaries, monthly gap-fill
                 and rolling sums, import-surge screening, workbook metrics
  pipelines/   — trade_report: wires sources -> transforms into a TradeReport
  utils/       — structlog configuration, exponential-backoff retry decorator

Quick start:
    from tradewatch_pipeline.pipelines.trade_report import run
    import asyncio
    report = asyncio.run(run("72085200"))

CLI:
    tradewatch report 72085200 --surge-start 2024-03 --surge-end 2024-05

Shared code from tradewatch_shared:
    from tradewatch_shared.config import settings
    from tradewatch_shared.models.trade import AnnualTradeRecord, TradeRecord
    from tradewatch_shared.time_utils import YearMonth
"""

__version__ = "0.1.0"
