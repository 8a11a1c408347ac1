"""
tests/conftest.py — Shared pytest fixtures for the tradewatch test suite.

Provides:
  mock_http()        — configured respx router for faking HTTP responses
  no_retry_delay()   — zero backoff so retry tests do not sleep
  make_trade / make_monthly / make_annual — record factories
  nfe_workbook / cgim_workbook — small .xlsx files written with openpyxl
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import openpyxl
import pytest
import respx

from tradewatch_shared.config import settings
from tradewatch_shared.models.trade import (
    AnnualTradeRecord,
    MonthlyTradeRecord,
    TradeRecord,
)

BASE_URL = "https://comexstat.test"


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_http():
    """
    Activate the respx mock router for all httpx requests.

    Usage in tests:
        def test_something(mock_http):
            mock_http.get(f"{BASE_URL}/...").mock(return_value=httpx.Response(200, json={...}))
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def no_retry_delay(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "retry_base_delay", 0.0)
    monkeypatch.setattr(settings, "retry_max_delay", 0.0)


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_trade() -> Callable[..., TradeRecord]:
    def _make(year: int, **metrics: Any) -> TradeRecord:
        return TradeRecord(year=year, **metrics)

    return _make


@pytest.fixture
def make_monthly() -> Callable[..., MonthlyTradeRecord]:
    def _make(year: int, month: int, kg: float = 0.0, fob: float = 0.0) -> MonthlyTradeRecord:
        return MonthlyTradeRecord(year=year, month=month, kg=kg, fob=fob)

    return _make


@pytest.fixture
def make_annual() -> Callable[..., AnnualTradeRecord]:
    def _make(year: int, partial_through_month: int | None = None, **values: Any) -> AnnualTradeRecord:
        return AnnualTradeRecord(year=year, partial_through_month=partial_through_month, **values)

    return _make


# ---------------------------------------------------------------------------
# Workbooks
# ---------------------------------------------------------------------------

def write_workbook(path: Path, sheets: dict[str, list[list[Any]]]) -> Path:
    """Write {sheet name: rows (header first)} to an .xlsx file."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(title=name)
        for row in rows:
            sheet.append(row)
    workbook.save(path)
    return path


NFE_HEADER = [
    "ano",
    "ncm_8d",
    "qtd_tributavel_producao",
    "qtd_tributavel_exp",
    "qtd_tributavel_imp",
    "consumo_nacional_aparente_qtd",
    "coeficiente_penetracao_imp_qtd",
]


@pytest.fixture
def nfe_workbook(tmp_path: Path) -> Path:
    return write_workbook(
        tmp_path / "nfe.xlsx",
        {
            "Dados": [
                NFE_HEADER,
                [2022, 72085200, 1000.0, 200.0, 300.0, 1100.0, 0.25],
                [2021, 72085200, 800.0, 100.0, 150.0, 850.0, 0.2],
                [2021, 39269090, 5.0, 1.0, 1.0, 5.0, 0.1],
            ],
        },
    )


@pytest.fixture
def cgim_workbook(tmp_path: Path) -> Path:
    return write_workbook(
        tmp_path / "cgim.xlsx",
        {
            "NCMs-CGIM-DINTE": [
                ["NCM", "Departamento Responsável", "Coordenação-Geral Responsável", "Setores"],
                [72085200, "DINTE", "CGIM", "Siderurgia"],
            ],
            "IABR": [
                ["NCM", "Sigla Entidade", "Entidade", "E-mail"],
                [72085200, "IABR", "Instituto Aço Brasil", "contato@example.org"],
                [72089000, "IABR", "Instituto Aço Brasil", "outro@example.org"],
            ],
        },
    )
