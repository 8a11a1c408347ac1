"""
tests/test_transforms/test_time_series.py — Tests for monthly validation,
gap-fill, and rolling 12-month sums.
"""

from __future__ import annotations

from tradewatch_shared.models.trade import MonthlyPoint
from tradewatch_shared.time_utils import YearMonth, month_range
from tradewatch_pipeline.transforms.time_series import (
    compute_rolling_imports,
    fill_monthly_gaps,
    rolling_twelve_month_sums,
    validate_monthly_records,
)


def _points(start: YearMonth, end: YearMonth, kg: float = 100.0) -> list[MonthlyPoint]:
    return [MonthlyPoint(period=ym, kg=kg, fob=kg * 2) for ym in month_range(start, end)]


class TestValidateMonthlyRecords:
    def test_month_field_resolution_order(self):
        rows = [
            {"year": "2020", "monthNumber": "3", "coMes": "7", "metricKG": 1},
            {"year": 2020, "coMes": 4, "metricKG": 1},
            {"year": 2020, "CO_MES": "05", "metricKG": 1},
            {"year": 2020, "mes": 6.0, "metricKG": 1},
            {"year": 2020, "month": 7, "metricKG": 1},
        ]

        result = validate_monthly_records(rows)

        assert [r.month for r in result.records] == [3, 4, 5, 6, 7]
        assert result.discarded == 0

    def test_present_but_null_month_is_invalid(self):
        rows = [{"year": 2020, "monthNumber": None, "coMes": 4}]

        result = validate_monthly_records(rows)

        assert result.records == []
        assert result.discarded == 1

    def test_discards_bad_year_and_month(self):
        rows = [
            {"year": "abc", "monthNumber": 1},
            {"year": 2020, "monthNumber": 13},
            {"year": 2020, "monthNumber": 0},
            {"year": 2020},
            {"monthNumber": 2},
            {"year": 2020, "monthNumber": 2, "metricKG": "1.234,5", "metricFOB": None},
        ]

        result = validate_monthly_records(rows)

        assert result.discarded == 5
        assert len(result) == 1
        assert result.records[0].kg == 1234.5
        assert result.records[0].fob == 0.0


class TestFillMonthlyGaps:
    def test_missing_months_become_zero(self, make_monthly):
        records = [make_monthly(2020, 1, kg=10), make_monthly(2020, 4, kg=40)]

        points = fill_monthly_gaps(records, floor_year=2019)

        assert [p.period.label() for p in points] == ["2020-01", "2020-02", "2020-03", "2020-04"]
        assert [p.kg for p in points] == [10, 0, 0, 40]

    def test_no_gaps_and_one_entry_per_month(self, make_monthly):
        records = [make_monthly(2019, m, kg=1) for m in (1, 5, 9)] + [make_monthly(2021, 2, kg=1)]

        points = fill_monthly_gaps(records, floor_year=2019)

        ordinals = [p.period.ordinal for p in points]
        assert ordinals == list(range(ordinals[0], ordinals[-1] + 1))
        assert points[0].period == YearMonth(2019, 1)
        assert points[-1].period == YearMonth(2021, 2)

    def test_same_month_records_are_summed(self, make_monthly):
        records = [make_monthly(2020, 6, kg=5, fob=1), make_monthly(2020, 6, kg=7, fob=2)]

        [point] = fill_monthly_gaps(records, floor_year=2019)

        assert point.kg == 12
        assert point.fob == 3

    def test_records_before_floor_are_ignored(self, make_monthly):
        records = [make_monthly(2018, 12, kg=999), make_monthly(2019, 3, kg=1)]

        points = fill_monthly_gaps(records, floor_year=2019)

        assert points[0].period == YearMonth(2019, 3)
        assert sum(p.kg for p in points) == 1

    def test_empty_after_floor(self, make_monthly):
        assert fill_monthly_gaps([make_monthly(2015, 1, kg=1)], floor_year=2019) == []


class TestRollingTwelveMonthSums:
    def test_fewer_than_twelve_points_is_empty(self):
        points = _points(YearMonth(2020, 1), YearMonth(2020, 11))

        assert rolling_twelve_month_sums(points, floor_year=2019) == []

    def test_exactly_twelve_points_give_one_window(self):
        points = _points(YearMonth(2020, 1), YearMonth(2020, 12))

        windows = rolling_twelve_month_sums(points, floor_year=2019)

        assert len(windows) == 1
        assert windows[0].period == YearMonth(2020, 12)
        assert windows[0].rolling_kg == 1200
        assert windows[0].rolling_fob == 2400

    def test_each_window_sums_twelve_months(self):
        points = _points(YearMonth(2019, 1), YearMonth(2021, 6))

        windows = rolling_twelve_month_sums(points, floor_year=2019)

        assert all(w.rolling_kg == 1200 for w in windows)
        assert all(w.rolling_fob == 2400 for w in windows)

    def test_first_window_ends_in_december_of_floor_year(self):
        points = _points(YearMonth(2019, 1), YearMonth(2020, 3))

        windows = rolling_twelve_month_sums(points, floor_year=2019)

        assert [w.period.label() for w in windows] == ["2019-12", "2020-01", "2020-02", "2020-03"]

    def test_window_values_follow_series(self):
        points = [
            MonthlyPoint(period=ym, kg=float(i), fob=0.0)
            for i, ym in enumerate(month_range(YearMonth(2020, 1), YearMonth(2021, 1)), start=1)
        ]

        windows = rolling_twelve_month_sums(points, floor_year=2019)

        assert [w.period.label() for w in windows] == ["2020-12", "2021-01"]
        assert windows[0].rolling_kg == sum(range(1, 13))
        assert windows[1].rolling_kg == sum(range(2, 14))


class TestComputeRollingImports:
    def test_gaps_count_as_zero_in_windows(self, make_monthly):
        records = [make_monthly(2019, m, kg=100) for m in range(1, 13) if m != 6]
        records.append(make_monthly(2020, 1, kg=100))

        windows = compute_rolling_imports(records, floor_year=2019)

        assert windows[0].period == YearMonth(2019, 12)
        assert windows[0].rolling_kg == 1100
        assert windows[1].rolling_kg == 1100

    def test_no_data(self):
        assert compute_rolling_imports([]) == []
