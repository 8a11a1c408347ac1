"""
transforms/spreadsheet_metrics.py — Derived series from the invoice/production
workbook.

Two year-ordered tables are built from NfeRow values:

    sales:        total sales (production qty), domestic sales, exports
    consumption:  domestic sales, imports, apparent national consumption,
                  import penetration coefficient

Each change column compares a row with the row before it in year order;
the first row, and any row whose prior value is zero, has no change.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from tradewatch_shared.models.spreadsheet import ConsumptionRow, NfeRow, SalesRow
from tradewatch_pipeline.transforms.summary import percent_change

log = structlog.get_logger(__name__)


def ensure_domestic_sales(rows: Sequence[NfeRow]) -> list[NfeRow]:
    """Fill a missing domestic_sales_qty with production_qty - export_qty."""
    completed: list[NfeRow] = []
    derived = 0
    for row in rows:
        if row.domestic_sales_qty is None:
            row = row.model_copy(
                update={"domestic_sales_qty": row.production_qty - row.export_qty}
            )
            derived += 1
        completed.append(row)
    if derived:
        log.debug("domestic_sales_derived", rows=derived)
    return completed


def _ordered(rows: Sequence[NfeRow]) -> list[NfeRow]:
    return sorted(ensure_domestic_sales(rows), key=lambda r: r.year)


def _change(current: float, previous: float | None) -> float | None:
    return None if previous is None else percent_change(current, previous)


def build_sales_series(rows: Sequence[NfeRow]) -> list[SalesRow]:
    """Total, domestic, and export sales per year with changes (%)."""
    series: list[SalesRow] = []
    prev: NfeRow | None = None
    for row in _ordered(rows):
        domestic = row.domestic_sales_qty or 0.0
        series.append(
            SalesRow(
                year=row.year,
                total_sales=row.production_qty,
                total_sales_change_pct=_change(
                    row.production_qty, prev.production_qty if prev else None
                ),
                domestic_sales=domestic,
                domestic_sales_change_pct=_change(
                    domestic, (prev.domestic_sales_qty or 0.0) if prev else None
                ),
                exports=row.export_qty,
                exports_change_pct=_change(row.export_qty, prev.export_qty if prev else None),
            )
        )
        prev = row
    return series


def build_consumption_series(rows: Sequence[NfeRow]) -> list[ConsumptionRow]:
    """Domestic sales, imports, apparent consumption, and import penetration (%)."""
    series: list[ConsumptionRow] = []
    prev: NfeRow | None = None
    for row in _ordered(rows):
        domestic = row.domestic_sales_qty or 0.0
        series.append(
            ConsumptionRow(
                year=row.year,
                domestic_sales=domestic,
                domestic_sales_change_pct=_change(
                    domestic, (prev.domestic_sales_qty or 0.0) if prev else None
                ),
                imports=row.import_qty,
                imports_change_pct=_change(row.import_qty, prev.import_qty if prev else None),
                apparent_consumption=row.apparent_consumption_qty,
                apparent_consumption_change_pct=_change(
                    row.apparent_consumption_qty,
                    prev.apparent_consumption_qty if prev else None,
                ),
                # stored as a ratio in the workbook
                import_penetration_pct=row.import_penetration_qty * 100.0,
            )
        )
        prev = row
    return series
