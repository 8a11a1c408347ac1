"""
tests/test_sources/test_spreadsheet_source.py — Tests for the NFE and CGIM
workbook readers. Workbooks are written to tmp_path with openpyxl.
"""

from __future__ import annotations

from pathlib import Path

import openpyxl
import pytest

from tradewatch_pipeline.sources.spreadsheet import (
    WorkbookError,
    read_cgim_workbook,
    read_nfe_workbook,
    sheet_names,
)


def _single_sheet(path: Path, title: str, rows: list[list]) -> Path:
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = title
    for row in rows:
        sheet.append(row)
    workbook.save(path)
    return path


class TestReadNfeWorkbook:
    def test_filters_by_ncm(self, nfe_workbook: Path):
        rows = read_nfe_workbook(nfe_workbook, ncm_code="72085200")

        assert [r.year for r in rows] == [2022, 2021]
        assert all(r.ncm_code == "72085200" for r in rows)
        assert rows[0].production_qty == 1000.0
        assert rows[0].export_qty == 200.0
        assert rows[0].import_qty == 300.0
        assert rows[0].apparent_consumption_qty == 1100.0
        assert rows[0].import_penetration_qty == pytest.approx(0.25)
        assert rows[0].domestic_sales_qty is None

    def test_all_rows_without_filter(self, nfe_workbook: Path):
        rows = read_nfe_workbook(nfe_workbook)

        assert {r.ncm_code for r in rows} == {"72085200", "39269090"}

    def test_unknown_code_gives_no_rows(self, nfe_workbook: Path):
        assert read_nfe_workbook(nfe_workbook, ncm_code="99999999") == []

    def test_missing_data_sheet(self, tmp_path: Path):
        path = _single_sheet(tmp_path / "other.xlsx", "Planilha1", [["ano", "ncm_8d"], [2022, 1]])

        with pytest.raises(WorkbookError, match="Dados"):
            read_nfe_workbook(path, ncm_code="72085200")

    def test_leading_zero_codes_match(self, tmp_path: Path):
        path = _single_sheet(
            tmp_path / "nfe.xlsx",
            "Dados",
            [["ano", "ncm_8d", "qtd_tributavel_producao"], [2023, 1012100, 42]],
        )

        rows = read_nfe_workbook(path, ncm_code="01012100")

        assert len(rows) == 1
        assert rows[0].production_qty == 42.0


class TestReadCgimWorkbook:
    def test_department_and_contacts(self, cgim_workbook: Path):
        lookup = read_cgim_workbook(cgim_workbook, "72085200")

        assert lookup.has_ncm_sheet is True
        assert lookup.info is not None
        assert lookup.info.department == "DINTE"
        assert lookup.info.general_coordination == "CGIM"
        assert lookup.info.sectors == "Siderurgia"
        assert [c.email for c in lookup.contacts] == ["contato@example.org"]
        assert lookup.contacts[0].sheet == "IABR"
        assert lookup.contacts[0].entity_name == "Instituto Aço Brasil"

    def test_code_not_covered(self, cgim_workbook: Path):
        lookup = read_cgim_workbook(cgim_workbook, "39269090")

        assert lookup.info is None
        assert lookup.contacts == []

    def test_without_department_sheet(self, tmp_path: Path):
        path = _single_sheet(
            tmp_path / "cgim.xlsx",
            "ABAL",
            [["NCM", "Entidade"], [72085200, "Associação Brasileira do Alumínio"]],
        )

        lookup = read_cgim_workbook(path, "72085200")

        assert lookup.has_ncm_sheet is False
        assert lookup.info is None
        assert [c.sheet for c in lookup.contacts] == ["ABAL"]


def test_sheet_names(cgim_workbook: Path):
    assert sheet_names(cgim_workbook) == ["NCMs-CGIM-DINTE", "IABR"]
