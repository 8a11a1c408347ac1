"""
transforms/time_series.py — Validation, gap-fill, and rolling sums for
monthly trade series.

Raw monthly rows from ComexStat are validated into MonthlyTradeRecord
values, laid onto a contiguous month spine (missing months become zeros),
and summed over trailing 12-month windows.

Usage:
    from tradewatch_pipeline.transforms.time_series import (
        validate_monthly_records,
        fill_monthly_gaps,
        rolling_twelve_month_sums,
        compute_rolling_imports,
    )

    result = validate_monthly_records(raw_rows)
    points = fill_monthly_gaps(result.records, floor_year=2019)
    windows = rolling_twelve_month_sums(points, floor_year=2019)

    # Or in one call:
    windows = compute_rolling_imports(result.records)
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import polars as pl
import structlog

from tradewatch_shared.coercion import coerce_metrics
from tradewatch_shared.constants import (
    MONTH_FIELD_CANDIDATES,
    MONTHLY_METRICS,
    ROLLING_WINDOW_MONTHS,
    SERIES_FLOOR_YEAR,
)
from tradewatch_shared.models.trade import MonthlyPoint, MonthlyTradeRecord, RollingWindowPoint
from tradewatch_shared.time_utils import YearMonth, month_range

log = structlog.get_logger(__name__)


@dataclass
class MonthlyValidationResult:
    """Validated monthly records plus a count of rows that were dropped."""

    records: list[MonthlyTradeRecord] = field(default_factory=list)
    discarded: int = 0

    def __len__(self) -> int:
        return len(self.records)


def _as_int(value: Any) -> int | None:
    """Integral value of an int, integral float, or digit string; else None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        return int(text) if text.isdigit() else None
    return None


def _month_of(row: Mapping[str, Any]) -> Any:
    for key in MONTH_FIELD_CANDIDATES:
        if key in row:
            return row[key]
    return None


def validate_monthly_records(rows: Iterable[Mapping[str, Any]]) -> MonthlyValidationResult:
    """
    Keep rows whose year is numeric and whose month resolves to 1..12.

    The month is taken from the first present key among monthNumber, coMes,
    CO_MES, mes, month. Metric values go through parse_api_number.
    """
    result = MonthlyValidationResult()
    for row in rows:
        year = _as_int(row.get("year"))
        month = _as_int(_month_of(row))
        if year is None or month is None or not 1 <= month <= 12:
            result.discarded += 1
            continue
        metrics = coerce_metrics(row, MONTHLY_METRICS)
        result.records.append(
            MonthlyTradeRecord(
                year=year, month=month, fob=metrics["metricFOB"], kg=metrics["metricKG"]
            )
        )

    if result.discarded:
        log.warning(
            "monthly_rows_discarded",
            discarded=result.discarded,
            kept=len(result.records),
        )
    return result


def fill_monthly_gaps(
    records: Sequence[MonthlyTradeRecord],
    *,
    floor_year: int = SERIES_FLOOR_YEAR,
) -> list[MonthlyPoint]:
    """
    Contiguous month-by-month series from max(Jan floor_year, earliest) to latest.

    Records before floor_year are ignored. Several records for the same
    month are summed. Months with no record get kg = fob = 0.

    Returns:
        Points ascending by period; empty if no record is on or after floor_year.
    """
    kept = [r for r in records if r.year >= floor_year]
    if not kept:
        log.info("monthly_series_empty", floor_year=floor_year, input_records=len(records))
        return []

    start = max(YearMonth(floor_year, 1), min(r.period for r in kept))
    end = max(r.period for r in kept)

    spine = pl.DataFrame(
        {"ordinal": [ym.ordinal for ym in month_range(start, end)]},
        schema={"ordinal": pl.Int64},
    )
    observed = (
        pl.DataFrame(
            {
                "ordinal": [r.period.ordinal for r in kept],
                "kg": [r.kg for r in kept],
                "fob": [r.fob for r in kept],
            },
            schema={"ordinal": pl.Int64, "kg": pl.Float64, "fob": pl.Float64},
        )
        .group_by("ordinal")
        .agg(pl.col("kg").sum(), pl.col("fob").sum())
    )
    filled = (
        spine.join(observed, on="ordinal", how="left")
        .with_columns(pl.col("kg", "fob").fill_null(0.0))
        .sort("ordinal")
    )

    synthesized = len(spine) - len(observed)
    if synthesized:
        log.debug("monthly_gaps_filled", months=len(spine), synthesized=synthesized)

    return [
        MonthlyPoint(period=YearMonth.from_ordinal(ordinal), kg=kg, fob=fob)
        for ordinal, kg, fob in filled.iter_rows()
    ]


def rolling_twelve_month_sums(
    points: Sequence[MonthlyPoint],
    *,
    floor_year: int = SERIES_FLOOR_YEAR,
    window: int = ROLLING_WINDOW_MONTHS,
) -> list[RollingWindowPoint]:
    """
    Trailing-window sums over a gap-filled series.

    Each window sums exactly `window` consecutive points. Windows ending
    inside floor_year are dropped except the one ending in December of
    floor_year (the first full calendar-year window).

    Returns:
        Points ascending by period; empty when fewer than `window` points.
    """
    if len(points) < window:
        log.info("rolling_window_insufficient", points=len(points), window=window)
        return []

    sums = (
        pl.DataFrame(
            {
                "ordinal": [p.period.ordinal for p in points],
                "kg": [p.kg for p in points],
                "fob": [p.fob for p in points],
            },
            schema={"ordinal": pl.Int64, "kg": pl.Float64, "fob": pl.Float64},
        )
        .with_columns(
            pl.col("kg").rolling_sum(window_size=window).alias("rolling_kg"),
            pl.col("fob").rolling_sum(window_size=window).alias("rolling_fob"),
            (pl.col("ordinal") // 12).alias("year"),
            (pl.col("ordinal") % 12 + 1).alias("month"),
        )
        .filter(
            pl.col("rolling_kg").is_not_null()
            & (
                (pl.col("year") > floor_year)
                | ((pl.col("year") == floor_year) & (pl.col("month") == 12))
            )
        )
    )
    return [
        RollingWindowPoint(
            period=YearMonth.from_ordinal(ordinal),
            rolling_kg=rolling_kg,
            rolling_fob=rolling_fob,
        )
        for ordinal, rolling_kg, rolling_fob in sums.select(
            "ordinal", "rolling_kg", "rolling_fob"
        ).iter_rows()
    ]


def compute_rolling_imports(
    records: Sequence[MonthlyTradeRecord],
    *,
    floor_year: int = SERIES_FLOOR_YEAR,
    window: int = ROLLING_WINDOW_MONTHS,
) -> list[RollingWindowPoint]:
    """fill_monthly_gaps followed by rolling_twelve_month_sums."""
    points = fill_monthly_gaps(records, floor_year=floor_year)
    return rolling_twelve_month_sums(points, floor_year=floor_year, window=window)
