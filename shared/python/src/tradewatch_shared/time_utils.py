"""
time_utils.py — Year-month arithmetic for monthly trade series.

ComexStat labels periods as "YYYY-MM" strings. Those labels are parsed once
into YearMonth values at the input boundary; all comparisons, ranges, and
shifts after that work on the (year, month) pair.

Usage:
    from tradewatch_shared.time_utils import YearMonth, month_range

    ym = YearMonth.parse("2024-03")              # YearMonth(2024, 3)
    ym.label()                                   # "2024-03"
    ym.next()                                    # YearMonth(2024, 4)
    ym.shift_years(-1)                           # YearMonth(2023, 3)
    month_range(YearMonth(2023, 11), ym)         # Nov, Dec, Jan, Feb, Mar
    months_between(YearMonth(2023, 11), ym)      # 5
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from dateutil.relativedelta import relativedelta

_YEAR_MONTH_RE = re.compile(r"(\d{4})-(\d{1,2})(?:-\d{1,2})?")


@dataclass(frozen=True, order=True)
class YearMonth:
    """A calendar month. Ordering is chronological (year first, then month)."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"month must be in 1..12, got {self.month}")

    @classmethod
    def parse(cls, raw: str) -> YearMonth:
        """
        Parse "YYYY-MM" (or an ISO date "YYYY-MM-DD") into a YearMonth.

        Raises:
            ValueError: if the string is not a year-month label.
        """
        m = _YEAR_MONTH_RE.fullmatch(raw.strip())
        if not m:
            raise ValueError(f"not a YYYY-MM label: {raw!r}")
        return cls(int(m.group(1)), int(m.group(2)))

    @classmethod
    def from_date(cls, d: date) -> YearMonth:
        return cls(d.year, d.month)

    @classmethod
    def from_ordinal(cls, ordinal: int) -> YearMonth:
        year, month_index = divmod(ordinal, 12)
        return cls(year, month_index + 1)

    @property
    def ordinal(self) -> int:
        """Months since year 0; consecutive months differ by exactly 1."""
        return self.year * 12 + (self.month - 1)

    def to_date(self) -> date:
        return date(self.year, self.month, 1)

    def label(self) -> str:
        return f"{self.year}-{self.month:02d}"

    def next(self) -> YearMonth:
        return self.shift_months(1)

    def shift_months(self, months: int) -> YearMonth:
        return YearMonth.from_date(self.to_date() + relativedelta(months=months))

    def shift_years(self, years: int) -> YearMonth:
        return YearMonth(self.year + years, self.month)

    def __str__(self) -> str:
        return self.label()


def months_between(start: YearMonth, end: YearMonth) -> int:
    """Inclusive count of calendar months from start to end (0 if inverted)."""
    return max(end.ordinal - start.ordinal + 1, 0)


def month_range(start: YearMonth, end: YearMonth) -> list[YearMonth]:
    """
    Every calendar month from start to end, inclusive.

    Returns an empty list when start is after end.
    """
    months: list[YearMonth] = []
    current = start
    while current <= end:
        months.append(current)
        current = current.next()
    return months
