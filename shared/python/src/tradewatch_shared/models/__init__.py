"""
tradewatch_shared.models — Pydantic record types for trade analysis.

Every record has a closed field set; numeric fields are finite floats with
a 0.0 default once they pass the coercion boundary.

  models.trade        — ComexStat inputs, annual/monthly series, surge results
  models.spreadsheet  — invoice/production workbook rows and derived series
"""

from tradewatch_shared.models.spreadsheet import (
    CgimNcmInfo,
    ConsumptionRow,
    EntityContact,
    NfeRow,
    SalesRow,
)
from tradewatch_shared.models.trade import (
    AnnualTradeRecord,
    CountryShare,
    LastUpdate,
    MonthlyPoint,
    MonthlyTradeRecord,
    NcmDetails,
    RollingWindowPoint,
    SurgeAnalysisResult,
    SurgePeriodValues,
    TradeRecord,
    YearSummaryRow,
)

__all__ = [
    "TradeRecord",
    "MonthlyTradeRecord",
    "LastUpdate",
    "NcmDetails",
    "AnnualTradeRecord",
    "YearSummaryRow",
    "MonthlyPoint",
    "RollingWindowPoint",
    "SurgePeriodValues",
    "SurgeAnalysisResult",
    "CountryShare",
    "NfeRow",
    "SalesRow",
    "ConsumptionRow",
    "CgimNcmInfo",
    "EntityContact",
]
