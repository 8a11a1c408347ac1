"""
tests/test_transforms/test_spreadsheet_metrics.py — Tests for NFE-derived
sales and apparent-consumption series.
"""

from __future__ import annotations

import pytest

from tradewatch_shared.models.spreadsheet import NfeRow
from tradewatch_pipeline.transforms.spreadsheet_metrics import (
    build_consumption_series,
    build_sales_series,
    ensure_domestic_sales,
)


def _row(year: int, **values) -> NfeRow:
    return NfeRow(year=year, ncm_code="72085200", **values)


class TestEnsureDomesticSales:
    def test_derived_from_production_minus_exports(self):
        [row] = ensure_domestic_sales([_row(2020, production_qty=1000, export_qty=250)])

        assert row.domestic_sales_qty == 750

    def test_negative_result_is_kept(self):
        [row] = ensure_domestic_sales([_row(2020, production_qty=100, export_qty=250)])

        assert row.domestic_sales_qty == -150

    def test_existing_value_kept(self):
        [row] = ensure_domestic_sales(
            [_row(2020, production_qty=1000, export_qty=250, domestic_sales_qty=900)]
        )

        assert row.domestic_sales_qty == 900

    def test_explicit_zero_kept(self):
        [row] = ensure_domestic_sales(
            [_row(2020, production_qty=1000, export_qty=250, domestic_sales_qty=0)]
        )

        assert row.domestic_sales_qty == 0


class TestBuildSalesSeries:
    def test_year_ordered_with_changes(self):
        rows = [
            _row(2022, production_qty=1500, export_qty=300),
            _row(2021, production_qty=1000, export_qty=200),
        ]

        series = build_sales_series(rows)

        assert [s.year for s in series] == [2021, 2022]
        assert series[0].total_sales_change_pct is None
        assert series[0].exports_change_pct is None
        assert series[1].total_sales_change_pct == pytest.approx(50.0)
        assert series[1].domestic_sales == 1200
        assert series[1].domestic_sales_change_pct == pytest.approx(50.0)
        assert series[1].exports_change_pct == pytest.approx(50.0)

    def test_zero_prior_value_gives_no_change(self):
        rows = [_row(2021, production_qty=0), _row(2022, production_qty=10)]

        series = build_sales_series(rows)

        assert series[1].total_sales_change_pct is None

    def test_empty(self):
        assert build_sales_series([]) == []


class TestBuildConsumptionSeries:
    def test_penetration_as_percentage(self):
        rows = [
            _row(2021, import_qty=100, apparent_consumption_qty=1000, import_penetration_qty=0.1),
            _row(2022, import_qty=150, apparent_consumption_qty=1250, import_penetration_qty=0.12),
        ]

        series = build_consumption_series(rows)

        assert series[0].import_penetration_pct == pytest.approx(10.0)
        assert series[1].import_penetration_pct == pytest.approx(12.0)
        assert series[1].imports_change_pct == pytest.approx(50.0)
        assert series[1].apparent_consumption_change_pct == pytest.approx(25.0)

    def test_change_compares_with_previous_row_not_previous_year(self):
        rows = [_row(2019, import_qty=100), _row(2021, import_qty=200)]

        series = build_consumption_series(rows)

        assert series[1].imports_change_pct == pytest.approx(100.0)
