"""
constants.py — shared constants used across the pipeline and the CLI.

Business thresholds, ComexStat metric lists, and spreadsheet sheet names
are defined here so the orchestrator, sources, and transforms agree on them.
The analysis functions take these as keyword defaults; callers override
them with values from settings.
"""

from __future__ import annotations

from typing import Final, Literal

# ---------------------------------------------------------------------------
# Analysis windows and thresholds
# ---------------------------------------------------------------------------
# First year with monthly data treated as reliable (rolling sums, surge).
SERIES_FLOOR_YEAR: Final[int] = 2019

# First year shown in the year-over-year summaries.
MIN_ANALYSIS_YEAR: Final[int] = 2019

# First year requested for the annual history.
HISTORY_START_YEAR: Final[int] = 2004

ROLLING_WINDOW_MONTHS: Final[int] = 12

# Current period >= 130% of the prior-period average flags a surge.
SURGE_THRESHOLD: Final[float] = 1.30
SURGE_COMPARISON_PERIODS: Final[int] = 3

# ---------------------------------------------------------------------------
# ComexStat API
# ---------------------------------------------------------------------------
EXPORT_METRICS: Final[list[str]] = ["metricFOB", "metricKG", "metricStatistic"]
IMPORT_METRICS: Final[list[str]] = [
    "metricFOB",
    "metricFreight",
    "metricInsurance",
    "metricCIF",
    "metricKG",
    "metricStatistic",
]
MONTHLY_METRICS: Final[list[str]] = ["metricFOB", "metricKG"]
COUNTRY_METRICS: Final[list[str]] = ["metricFOB", "metricKG"]

# API metric name -> TradeRecord field
METRIC_FIELDS: Final[dict[str, str]] = {
    "metricFOB": "fob",
    "metricKG": "kg",
    "metricStatistic": "statistic",
    "metricFreight": "freight",
    "metricInsurance": "insurance",
    "metricCIF": "cif",
}

# The monthly endpoint is inconsistent about which key carries the month.
MONTH_FIELD_CANDIDATES: Final[tuple[str, ...]] = (
    "monthNumber",
    "coMes",
    "CO_MES",
    "mes",
    "month",
)

# ---------------------------------------------------------------------------
# Spreadsheets
# ---------------------------------------------------------------------------
NFE_SHEET: Final[str] = "Dados"
CGIM_SHEET: Final[str] = "NCMs-CGIM-DINTE"
ENTITY_SHEETS: Final[tuple[str, ...]] = (
    "ABITAM",
    "IABR",
    "ABAL",
    "ABCOBRE",
    "ABRAFE",
    "IBÁ",
    "SICETEL",
    "SINDIFER",
)

UNKNOWN_COUNTRY: Final[str] = "Unknown"

# ---------------------------------------------------------------------------
# Typed literals
# ---------------------------------------------------------------------------
FlowDirection = Literal["import", "export"]
LogFormat = Literal["json", "console"]
