"""
pipelines/trade_report.py — Full trade report for one NCM code.

Sources: ComexStat API (annual, monthly and per-country statistics) and,
optionally, the NFE and CGIM workbooks supplied by the user.

Steps:
  1. Last update, NCM description and statistical unit (concurrently)
  2. Annual history from history_start_year through the last full year,
     plus the current partial year, both flows concurrently
  3. Year-over-year summaries for imports and exports
  4. Per-country shares for country_year (optional)
  5. Monthly imports from series_floor_year: rolling 12-month sums and,
     when a window is given, the import-surge screen
  6. NFE sales / apparent-consumption tables (optional)
  7. CGIM department and association contacts (optional)

A failed upstream request leaves its section empty; the report is still
produced. A missing workbook sheet is recorded in `warnings`.

Usage:
    from tradewatch_pipeline.pipelines.trade_report import run
    report = await run("72085200", surge_start=YearMonth(2024, 3),
                       surge_end=YearMonth(2024, 5))
"""

from __future__ import annotations

import asyncio
from datetime import date
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from tradewatch_shared.config import settings
from tradewatch_shared.constants import EXPORT_METRICS, IMPORT_METRICS
from tradewatch_shared.models.spreadsheet import (
    CgimNcmInfo,
    ConsumptionRow,
    EntityContact,
    SalesRow,
)
from tradewatch_shared.models.trade import (
    AnnualTradeRecord,
    CountryShare,
    LastUpdate,
    NcmDetails,
    RollingWindowPoint,
    SurgeAnalysisResult,
    YearSummaryRow,
)
from tradewatch_shared.time_utils import YearMonth
from tradewatch_pipeline.sources.comexstat import ComexStatSource
from tradewatch_pipeline.sources.spreadsheet import (
    WorkbookError,
    read_cgim_workbook,
    read_nfe_workbook,
)
from tradewatch_pipeline.transforms.annual import aggregate_annual, merge_annual_series
from tradewatch_pipeline.transforms.spreadsheet_metrics import (
    build_consumption_series,
    build_sales_series,
)
from tradewatch_pipeline.transforms.summary import summarize_year_over_year
from tradewatch_pipeline.transforms.surge import analyze_import_surge
from tradewatch_pipeline.transforms.time_series import compute_rolling_imports
from tradewatch_pipeline.utils.logging import get_logger

log = get_logger(__name__, pipeline="trade_report")


class TradeReport(BaseModel):
    model_config = ConfigDict(ser_json_inf_nan="strings")

    ncm_code: str
    details: NcmDetails = Field(default_factory=NcmDetails)
    last_update: LastUpdate = Field(default_factory=LastUpdate)

    annual: list[AnnualTradeRecord] = Field(default_factory=list)
    import_summary: list[YearSummaryRow] = Field(default_factory=list)
    export_summary: list[YearSummaryRow] = Field(default_factory=list)

    country_year: int | None = None
    export_countries: list[CountryShare] = Field(default_factory=list)
    import_countries: list[CountryShare] = Field(default_factory=list)

    monthly_import_records: int = 0
    monthly_discarded: int = 0
    rolling_imports: list[RollingWindowPoint] = Field(default_factory=list)
    surge: SurgeAnalysisResult | None = None

    sales: list[SalesRow] = Field(default_factory=list)
    consumption: list[ConsumptionRow] = Field(default_factory=list)

    cgim: CgimNcmInfo | None = None
    entity_contacts: list[EntityContact] = Field(default_factory=list)

    warnings: list[str] = Field(default_factory=list)


async def _annual_series(
    source: ComexStatSource,
    ncm_code: str,
    period_from: YearMonth,
    period_to: YearMonth,
    details: NcmDetails,
    last_update: LastUpdate,
) -> list[AnnualTradeRecord]:
    exports, imports = await asyncio.gather(
        source.fetch_records(
            "export", period_from, period_to, ncm_code,
            metrics=EXPORT_METRICS, details=["ncm"],
        ),
        source.fetch_records(
            "import", period_from, period_to, ncm_code,
            metrics=IMPORT_METRICS, details=["ncm"],
        ),
    )
    return aggregate_annual(
        exports, imports, ncm_code=ncm_code, details=details, last_update=last_update
    )


async def run(
    ncm_code: str,
    *,
    surge_start: YearMonth | None = None,
    surge_end: YearMonth | None = None,
    nfe_path: str | Path | None = None,
    cgim_path: str | Path | None = None,
    country_year: int | None = None,
    source: ComexStatSource | None = None,
) -> TradeReport:
    """
    Build a TradeReport for one NCM code.

    Args:
        ncm_code:     8-digit NCM classification code.
        surge_start:  First month of the surge-analysis window.
        surge_end:    Last month of the surge-analysis window.
        nfe_path:     NFE workbook to derive sales/consumption tables from.
        cgim_path:    CGIM workbook to look up responsibility and contacts.
        country_year: Year for the per-country breakdown (skipped if None).
        source:       ComexStat adapter (a default one is created if None).

    Returns:
        TradeReport; sections whose inputs were unavailable are empty.
    """
    source = source or ComexStatSource()
    report_log = log.bind(ncm_code=ncm_code)
    report_log.info("trade_report_start")

    last_update, description, unit = await asyncio.gather(
        source.fetch_last_update(),
        source.fetch_ncm_description(ncm_code),
        source.fetch_ncm_unit(ncm_code),
    )
    report = TradeReport(
        ncm_code=ncm_code,
        details=NcmDetails(description=description, unit=unit),
        last_update=last_update,
        country_year=country_year,
    )
    latest = last_update.period

    # -- Annual series ---------------------------------------------------
    last_full_year = (last_update.year or date.today().year) - 1
    annual = await _annual_series(
        source, ncm_code,
        YearMonth(settings.history_start_year, 1), YearMonth(last_full_year, 12),
        report.details, last_update,
    )
    if latest is not None:
        current = await _annual_series(
            source, ncm_code,
            YearMonth(latest.year, 1), latest,
            report.details, last_update,
        )
        annual = merge_annual_series(annual, current)
    report.annual = annual
    report.import_summary = summarize_year_over_year(
        annual, "import", min_year=settings.min_analysis_year
    )
    report.export_summary = summarize_year_over_year(
        annual, "export", min_year=settings.min_analysis_year
    )

    # -- Countries -------------------------------------------------------
    if country_year is not None:
        report.export_countries, report.import_countries = await asyncio.gather(
            source.fetch_country_shares("export", country_year, ncm_code),
            source.fetch_country_shares("import", country_year, ncm_code),
        )

    # -- Monthly imports: rolling sums and surge ---------------------------
    monthly_end = latest or surge_end
    if monthly_end is not None:
        monthly = await source.fetch_monthly(
            "import", YearMonth(settings.series_floor_year, 1), monthly_end, ncm_code
        )
        report.monthly_import_records = len(monthly.records)
        report.monthly_discarded = monthly.discarded
        if not monthly.records:
            report.warnings.append("No valid monthly import records were returned.")
        report.rolling_imports = compute_rolling_imports(
            monthly.records, floor_year=settings.series_floor_year
        )
        if surge_start is not None and surge_end is not None:
            report.surge = analyze_import_surge(
                monthly.records,
                surge_start,
                surge_end,
                last_update=latest,
                floor_year=settings.series_floor_year,
                comparison_periods=settings.surge_comparison_periods,
                threshold=settings.surge_threshold,
            )

    # -- Workbooks -------------------------------------------------------
    if nfe_path is not None:
        try:
            nfe_rows = await asyncio.to_thread(read_nfe_workbook, nfe_path, ncm_code)
        except WorkbookError as exc:
            report_log.warning("nfe_workbook_rejected", error=str(exc))
            report.warnings.append(str(exc))
        else:
            report.sales = build_sales_series(nfe_rows)
            report.consumption = build_consumption_series(nfe_rows)

    if cgim_path is not None:
        lookup = await asyncio.to_thread(read_cgim_workbook, cgim_path, ncm_code)
        report.cgim = lookup.info
        report.entity_contacts = lookup.contacts
        if not lookup.has_ncm_sheet:
            report.warnings.append(f"CGIM workbook {cgim_path} has no NCM sheet.")

    report_log.info(
        "trade_report_complete",
        years=len(report.annual),
        rolling_points=len(report.rolling_imports),
        surge_status=report.surge.status if report.surge else None,
        warnings=len(report.warnings),
    )
    return report
