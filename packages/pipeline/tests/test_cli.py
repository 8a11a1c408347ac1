"""
tests/test_cli.py — Tests for the click entrypoint.

The pipeline is replaced with an AsyncMock; no HTTP is performed.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterator
from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner
from structlog.testing import capture_logs

from tradewatch_shared.models.trade import (
    AnnualTradeRecord,
    LastUpdate,
    NcmDetails,
    SurgeAnalysisResult,
)
from tradewatch_shared.time_utils import YearMonth
from tradewatch_pipeline.cli import main, render_report
from tradewatch_pipeline.pipelines.trade_report import TradeReport


def _report() -> TradeReport:
    return TradeReport(
        ncm_code="72085200",
        details=NcmDetails(description="Laminados planos", unit="QUILOGRAMA LIQUIDO"),
        last_update=LastUpdate(year=2025, month=5),
        annual=[
            AnnualTradeRecord(year=2024, export_fob=1500.0, import_fob=2500.0, balance_fob=-1000.0),
            AnnualTradeRecord(year=2025, partial_through_month=5, import_fob=10.0),
        ],
    )


@pytest.fixture
def fake_run() -> Iterator[AsyncMock]:
    mock = AsyncMock(return_value=_report())
    with patch("tradewatch_pipeline.cli.run_report", new=mock), patch(
        "tradewatch_pipeline.cli.configure_logging"
    ):
        yield mock


def _invoke(*args: str):
    with capture_logs():
        return CliRunner().invoke(main, list(args))


class TestReportCommand:
    def test_text_report(self, fake_run: AsyncMock):
        result = _invoke("report", "7208.52.00")

        assert result.exit_code == 0, result.output
        assert "NCM 7208.52.00: Laminados planos" in result.output
        assert "2025 (through month 05)" in result.output
        assert "2.500" in result.output
        assert fake_run.await_args.args == ("72085200",)

    def test_json_output(self, fake_run: AsyncMock):
        result = _invoke("report", "72085200", "--json")

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["ncm_code"] == "72085200"
        assert payload["annual"][1]["year_label"] == "2025 (through month 05)"

    def test_json_keeps_unbounded_surge_change(self, fake_run: AsyncMock):
        fake_run.return_value = _report().model_copy(
            update={
                "surge": SurgeAnalysisResult(
                    status="ok", percentage_change=math.inf, is_surge=True
                )
            }
        )

        result = _invoke("report", "72085200", "--json")

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["surge"]["percentage_change"] == "Infinity"
        restored = TradeReport.model_validate_json(result.output)
        assert math.isinf(restored.surge.percentage_change)

    def test_surge_window_is_parsed(self, fake_run: AsyncMock):
        result = _invoke(
            "report", "72085200", "--surge-start", "2024-03", "--surge-end", "2024-05"
        )

        assert result.exit_code == 0, result.output
        kwargs = fake_run.await_args.kwargs
        assert kwargs["surge_start"] == YearMonth(2024, 3)
        assert kwargs["surge_end"] == YearMonth(2024, 5)

    @pytest.mark.parametrize("code", ["7208520", "7208520A", "720852001"])
    def test_rejects_malformed_ncm(self, fake_run: AsyncMock, code: str):
        result = _invoke("report", code)

        assert result.exit_code == 2
        assert "8 digits" in result.output
        fake_run.assert_not_awaited()

    def test_surge_options_must_be_paired(self, fake_run: AsyncMock):
        result = _invoke("report", "72085200", "--surge-start", "2024-03")

        assert result.exit_code == 2
        assert "together" in result.output

    def test_rejects_bad_month(self, fake_run: AsyncMock):
        result = _invoke(
            "report", "72085200", "--surge-start", "2024-13", "--surge-end", "2024-12"
        )

        assert result.exit_code == 2
        fake_run.assert_not_awaited()

    def test_missing_workbook(self, fake_run: AsyncMock, tmp_path):
        result = _invoke("report", "72085200", "--nfe", str(tmp_path / "absent.xlsx"))

        assert result.exit_code == 2
        fake_run.assert_not_awaited()


class TestRenderReport:
    def test_surge_error_is_shown(self):
        report = _report().model_copy(
            update={
                "surge": SurgeAnalysisResult(
                    status="out_of_range", error="Requested end month 2025-07 is after ..."
                )
            }
        )

        text = render_report(report)

        assert "Import surge screen" in text
        assert "Requested end month 2025-07" in text

    def test_empty_sections(self):
        text = render_report(TradeReport(ncm_code="72085200"))

        assert "(no data)" in text
        assert "Data published through: unknown" in text
