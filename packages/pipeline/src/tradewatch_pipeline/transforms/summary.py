"""
transforms/summary.py — Year-over-year summary of one flow direction.

The prior year is looked up by value (year - 1) in the full annual series, not
by position, so a missing year yields no change rather than a comparison
against an older year. Changes for a partial current year against a full
prior year are left uncomputed; the totals are still reported.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from tradewatch_shared.constants import MIN_ANALYSIS_YEAR, FlowDirection
from tradewatch_shared.models.trade import AnnualTradeRecord, YearSummaryRow

log = structlog.get_logger(__name__)


def percent_change(current: float, previous: float) -> float | None:
    """(current - previous) / previous * 100, or None when previous is zero."""
    if previous == 0:
        return None
    return (current - previous) / previous * 100.0


def summarize_year_over_year(
    records: Sequence[AnnualTradeRecord],
    flow: FlowDirection,
    *,
    min_year: int = MIN_ANALYSIS_YEAR,
) -> list[YearSummaryRow]:
    """
    One summary row per annual record with year >= min_year.

    Args:
        records:  Output of aggregate_annual (historical plus current year).
        flow:     "import" or "export".
        min_year: Earliest year shown. Earlier years still serve as the
                  baseline for the first year shown.

    Returns:
        Rows ascending by year. Changes are None when there is no prior
        year, the prior value is zero, or the year is partial and the prior
        year is not.
    """
    by_year = {r.year: r for r in records}
    rows: list[YearSummaryRow] = []

    for record in sorted((r for r in records if r.year >= min_year), key=lambda r: r.year):
        fob, kg, price = record.flow_totals(flow)
        previous = by_year.get(record.year - 1)
        fob_change = kg_change = price_change = None

        comparable = previous is not None and not (
            record.is_partial_year and not previous.is_partial_year
        )
        if previous is not None and comparable:
            prev_fob, prev_kg, prev_price = previous.flow_totals(flow)
            fob_change = percent_change(fob, prev_fob)
            kg_change = percent_change(kg, prev_kg)
            price_change = percent_change(price, prev_price)

        rows.append(
            YearSummaryRow(
                year=record.year,
                year_label=record.year_label,
                flow=flow,
                fob=fob,
                kg=kg,
                price_per_ton=price,
                fob_change_pct=fob_change,
                kg_change_pct=kg_change,
                price_change_pct=price_change,
            )
        )

    log.debug("year_over_year_summarized", flow=flow, min_year=min_year, rows=len(rows))
    return rows
