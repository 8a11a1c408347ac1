"""
tradewatch_pipeline.sources — data source adapters.

  ComexStatSource   — ComexStat REST API (annual, monthly, per-country data)
  read_nfe_workbook — invoice/production workbook ("Dados" sheet)
  read_cgim_workbook — CGIM/DINTE responsibility and contacts workbook
"""

from tradewatch_pipeline.sources.comexstat import ComexStatSource, RateLimitedError
from tradewatch_pipeline.sources.spreadsheet import (
    CgimLookup,
    WorkbookError,
    read_cgim_workbook,
    read_nfe_workbook,
)

__all__ = [
    "ComexStatSource",
    "RateLimitedError",
    "CgimLookup",
    "WorkbookError",
    "read_cgim_workbook",
    "read_nfe_workbook",
]
