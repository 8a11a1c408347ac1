"""
transforms/surge.py — Import-surge screening for a user-chosen period.

The imported weight of a period (a run of calendar months) is compared with
the same months in each of the preceding years. A surge is flagged when the
current weight reaches `threshold` times the average of those prior periods.

Usage:
    from tradewatch_pipeline.transforms.surge import analyze_import_surge

    result = analyze_import_surge(
        monthly_imports,
        YearMonth(2024, 3), YearMonth(2024, 5),
        last_update=YearMonth(2025, 5),
    )
    if result.ok and result.is_surge:
        ...
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import structlog

from tradewatch_shared.constants import (
    SERIES_FLOOR_YEAR,
    SURGE_COMPARISON_PERIODS,
    SURGE_THRESHOLD,
)
from tradewatch_shared.formatting import month_name_pt_br
from tradewatch_shared.models.trade import (
    MonthlyTradeRecord,
    SurgeAnalysisResult,
    SurgePeriodValues,
)
from tradewatch_shared.time_utils import YearMonth

log = structlog.get_logger(__name__)


def period_label(start: YearMonth, end: YearMonth) -> str:
    """e.g. "março/2024 - maio/2024"."""
    return (
        f"{month_name_pt_br(start.month)}/{start.year} - "
        f"{month_name_pt_br(end.month)}/{end.year}"
    )


def period_sum_kg(
    records: Sequence[MonthlyTradeRecord],
    start: YearMonth,
    end: YearMonth,
) -> float:
    """Total kg of records whose (year, month) lies in [start, end]."""
    return sum(r.kg for r in records if start <= r.period <= end)


def _period_values(
    records: Sequence[MonthlyTradeRecord],
    start: YearMonth,
    end: YearMonth,
) -> SurgePeriodValues:
    return SurgePeriodValues(
        label=period_label(start, end),
        start=start,
        end=end,
        sum_kg=period_sum_kg(records, start, end),
        year=start.year,
    )


def analyze_import_surge(
    records: Sequence[MonthlyTradeRecord],
    start: YearMonth,
    end: YearMonth,
    *,
    last_update: YearMonth | None,
    floor_year: int = SERIES_FLOOR_YEAR,
    comparison_periods: int = SURGE_COMPARISON_PERIODS,
    threshold: float = SURGE_THRESHOLD,
) -> SurgeAnalysisResult:
    """
    Compare the import weight of [start, end] with the same months in
    each of the `comparison_periods` previous years.

    Args:
        records:            Validated monthly import records.
        start, end:         Analysis window, inclusive.
        last_update:        Last month with published data; the window
                            may not end after it. None skips the check.
        floor_year:         Earliest year of usable data; a prior period
                            starting before it is unavailable.
        comparison_periods: Number of prior periods averaged.
        threshold:          Surge when current >= threshold * average.

    Returns:
        SurgeAnalysisResult. Failures are reported through `status` and
        `error`, never raised.
    """
    bind = log.bind(start=start.label(), end=end.label())

    if start > end:
        bind.info("surge_invalid_window")
        return SurgeAnalysisResult(
            status="invalid_window",
            error=f"Start month {start} is after end month {end}.",
        )

    if last_update is not None and end > last_update:
        bind.info("surge_out_of_range", last_update=last_update.label())
        return SurgeAnalysisResult(
            status="out_of_range",
            error=(
                f"Requested end month {end} is after the last published month "
                f"{last_update}."
            ),
        )

    current = _period_values(records, start, end)

    previous: list[SurgePeriodValues] = []
    for offset in range(1, comparison_periods + 1):
        prev_start = start.shift_years(-offset)
        if prev_start.year < floor_year:
            break
        previous.append(_period_values(records, prev_start, end.shift_years(-offset)))

    if len(previous) < comparison_periods:
        bind.info("surge_insufficient_history", found=len(previous), needed=comparison_periods)
        return SurgeAnalysisResult(
            status="insufficient_history",
            current_period=current,
            previous_periods=previous,
            error=(
                f"{comparison_periods} complete prior periods from {floor_year} onward "
                f"are required; only {len(previous)} available."
            ),
        )

    if current.sum_kg == 0 and all(p.sum_kg == 0 for p in previous):
        bind.info("surge_no_data")
        return SurgeAnalysisResult(
            status="no_data",
            current_period=current,
            previous_periods=previous,
            error="No import records in the selected period or the comparison periods.",
        )

    average = sum(p.sum_kg for p in previous) / len(previous)
    if average != 0:
        change = (current.sum_kg - average) / average * 100.0
    elif current.sum_kg > 0:
        change = math.inf
    else:
        change = 0.0
    is_surge = current.sum_kg >= threshold * average

    bind.info(
        "surge_analyzed",
        current_kg=current.sum_kg,
        average_previous_kg=average,
        percentage_change=change,
        is_surge=is_surge,
    )
    return SurgeAnalysisResult(
        status="ok",
        current_period=current,
        previous_periods=previous,
        average_previous_kg=average,
        percentage_change=change,
        is_surge=is_surge,
    )
