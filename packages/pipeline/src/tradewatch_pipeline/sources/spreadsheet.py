"""
sources/spreadsheet.py — Readers for the user-supplied Excel workbooks.

  NFE workbook   — invoice/production data, sheet "Dados", one row per
                   (NCM code, year)
  CGIM workbook  — sheet "NCMs-CGIM-DINTE" (which department covers a code)
                   plus one sheet per industry association with contacts

Sheets are read with polars (openpyxl engine). NCM cells are normalized to
8-digit text before filtering, since Excel stores them as numbers.

Usage:
    rows = read_nfe_workbook("nfe.xlsx", ncm_code="72085200")
    lookup = read_cgim_workbook("cgim.xlsx", ncm_code="72085200")
    lookup.info, lookup.contacts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import openpyxl
import polars as pl
import structlog
from pydantic import ValidationError

from tradewatch_shared.constants import CGIM_SHEET, ENTITY_SHEETS, NFE_SHEET
from tradewatch_shared.models.spreadsheet import (
    CgimNcmInfo,
    EntityContact,
    NfeRow,
    ncm_text,
)

log = structlog.get_logger(__name__)


class WorkbookError(ValueError):
    """A workbook is missing a required sheet or cannot be read."""


@dataclass
class CgimLookup:
    """Result of looking one NCM code up in the CGIM workbook."""

    info: CgimNcmInfo | None = None
    contacts: list[EntityContact] = field(default_factory=list)
    # False when the workbook has no "NCMs-CGIM-DINTE" sheet at all
    has_ncm_sheet: bool = True


def sheet_names(path: str | Path) -> list[str]:
    workbook = openpyxl.load_workbook(path, read_only=True)
    try:
        return list(workbook.sheetnames)
    finally:
        workbook.close()


def read_sheet_rows(path: str | Path, sheet: str) -> list[dict[str, Any]]:
    """All rows of one sheet as dicts keyed by the header row."""
    frame = pl.read_excel(path, sheet_name=sheet, engine="openpyxl")
    return frame.to_dicts()


def read_nfe_workbook(path: str | Path, ncm_code: str | None = None) -> list[NfeRow]:
    """
    Parse the "Dados" sheet of an NFE workbook.

    Args:
        path:     Workbook path.
        ncm_code: Keep only rows for this code (all rows when None).

    Raises:
        WorkbookError: if the workbook has no "Dados" sheet.
    """
    if NFE_SHEET not in sheet_names(path):
        raise WorkbookError(f'sheet "{NFE_SHEET}" not found in {path}')

    rows: list[NfeRow] = []
    skipped = 0
    for raw in read_sheet_rows(path, NFE_SHEET):
        if ncm_code is not None and ncm_text(raw.get("ncm_8d", "")) != ncm_code:
            continue
        try:
            rows.append(NfeRow.from_sheet_row(raw))
        except ValidationError:
            skipped += 1

    log.info(
        "nfe_workbook_read",
        path=str(path),
        ncm_code=ncm_code,
        rows=len(rows),
        skipped=skipped,
    )
    return rows


def read_cgim_workbook(path: str | Path, ncm_code: str) -> CgimLookup:
    """
    Find the responsible department and association contacts for an NCM code.

    Missing association sheets are skipped. The department entry is the
    first matching row of the "NCMs-CGIM-DINTE" sheet.
    """
    available = set(sheet_names(path))
    lookup = CgimLookup(has_ncm_sheet=CGIM_SHEET in available)

    if lookup.has_ncm_sheet:
        for raw in read_sheet_rows(path, CGIM_SHEET):
            if ncm_text(raw.get("NCM", "")) == ncm_code:
                lookup.info = CgimNcmInfo.from_sheet_row(raw)
                break
    else:
        log.warning("cgim_sheet_missing", path=str(path), sheet=CGIM_SHEET)

    for sheet in ENTITY_SHEETS:
        if sheet not in available:
            continue
        lookup.contacts.extend(
            EntityContact.from_sheet_row(sheet, raw)
            for raw in read_sheet_rows(path, sheet)
            if ncm_text(raw.get("NCM", "")) == ncm_code
        )

    log.info(
        "cgim_workbook_read",
        path=str(path),
        ncm_code=ncm_code,
        covered=lookup.info is not None,
        contacts=len(lookup.contacts),
    )
    return lookup
