"""
tests/test_transforms/test_summary.py — Tests for year-over-year summaries.
"""

from __future__ import annotations

import pytest

from tradewatch_pipeline.transforms.summary import percent_change, summarize_year_over_year


class TestPercentChange:
    def test_increase(self):
        assert percent_change(150, 100) == pytest.approx(50.0)

    def test_decrease(self):
        assert percent_change(50, 100) == pytest.approx(-50.0)

    def test_zero_baseline_is_none(self):
        assert percent_change(10, 0) is None


class TestSummarizeYearOverYear:
    def test_only_years_from_min_year(self, make_annual):
        records = [make_annual(y, import_fob=100) for y in range(2015, 2023)]

        rows = summarize_year_over_year(records, "import", min_year=2019)

        assert [r.year for r in rows] == [2019, 2020, 2021, 2022]

    def test_first_year_shown_compares_with_earlier_year(self, make_annual):
        records = [make_annual(2018, import_fob=100), make_annual(2019, import_fob=150)]

        [row] = summarize_year_over_year(records, "import", min_year=2019)

        assert row.fob_change_pct == pytest.approx(50.0)

    def test_changes_per_flow(self, make_annual):
        records = [
            make_annual(2019, export_fob=100, export_kg=10, export_price_per_ton=200),
            make_annual(2020, export_fob=150, export_kg=5, export_price_per_ton=220),
        ]

        rows = summarize_year_over_year(records, "export")

        assert rows[0].fob_change_pct is None
        assert rows[1].fob == 150
        assert rows[1].fob_change_pct == pytest.approx(50.0)
        assert rows[1].kg_change_pct == pytest.approx(-50.0)
        assert rows[1].price_change_pct == pytest.approx(10.0)

    def test_missing_prior_year_gives_no_change(self, make_annual):
        records = [make_annual(2019, import_fob=100), make_annual(2021, import_fob=300)]

        rows = summarize_year_over_year(records, "import")

        assert rows[1].year == 2021
        assert rows[1].fob_change_pct is None
        assert rows[1].kg_change_pct is None

    def test_zero_prior_value_gives_no_change(self, make_annual):
        records = [make_annual(2019, import_fob=0), make_annual(2020, import_fob=100)]

        rows = summarize_year_over_year(records, "import")

        assert rows[1].fob_change_pct is None

    def test_partial_year_against_full_year_is_suppressed(self, make_annual):
        records = [
            make_annual(2023, import_fob=100, import_kg=100),
            make_annual(2024, partial_through_month=3, import_fob=500, import_kg=50),
        ]

        rows = summarize_year_over_year(records, "import")

        partial = rows[-1]
        assert partial.year_label == "2024 (through month 03)"
        assert partial.fob == 500
        assert partial.fob_change_pct is None
        assert partial.kg_change_pct is None
        assert partial.price_change_pct is None

    def test_display_dict_renders_blank_and_percent(self, make_annual):
        records = [make_annual(2019, import_fob=100), make_annual(2020, import_fob=125)]

        rows = summarize_year_over_year(records, "import")

        assert rows[0].to_display_dict()["Var. (%) Imports (US$ FOB)"] == ""
        assert rows[1].to_display_dict()["Var. (%) Imports (US$ FOB)"] == "25,00%"

    def test_empty_input(self):
        assert summarize_year_over_year([], "export") == []
