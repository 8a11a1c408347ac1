"""
models/trade.py — Pydantic models for ComexStat trade records and the
series derived from them.

Raw API rows are converted with TradeRecord.from_api_row(); every metric
passes through parse_api_number on the way in, so all numeric fields are
finite floats with a 0.0 default.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tradewatch_shared.coercion import parse_api_number
from tradewatch_shared.constants import METRIC_FIELDS, FlowDirection
from tradewatch_shared.formatting import format_percentage_pt_br
from tradewatch_shared.time_utils import YearMonth

PARTIAL_YEAR_LABEL = "{year} (through month {month:02d})"


class _FrozenModel(BaseModel):
    # +inf and NaN serialize to JSON as "Infinity" / "NaN"
    model_config = ConfigDict(frozen=True, ser_json_inf_nan="strings")


# ---------------------------------------------------------------------------
# Collaborator payloads
# ---------------------------------------------------------------------------


class LastUpdate(_FrozenModel):
    """Most recent month the data source has published complete data for."""

    updated: str | None = None
    year: int | None = None
    month: int | None = Field(default=None, ge=1, le=12)

    @property
    def period(self) -> YearMonth | None:
        if self.year is None or self.month is None:
            return None
        return YearMonth(self.year, self.month)


class NcmDetails(_FrozenModel):
    description: str | None = None
    unit: str | None = None


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


class TradeRecord(_FrozenModel):
    """One ComexStat row for a single flow direction."""

    year: int
    ncm_code: str | None = None
    country: str | None = None
    fob: float = 0.0
    kg: float = 0.0
    statistic: float = 0.0
    freight: float = 0.0
    insurance: float = 0.0
    cif: float = 0.0

    @field_validator("fob", "kg", "statistic", "freight", "insurance", "cif", mode="before")
    @classmethod
    def coerce_metric(cls, v: Any) -> float:
        return parse_api_number(v)

    @classmethod
    def from_api_row(cls, row: dict[str, Any]) -> TradeRecord:
        """Map an API row ("metricFOB", "coNcm", ...) onto the fixed field set."""
        metrics = {field: row.get(api_name) for api_name, field in METRIC_FIELDS.items()}
        return cls(
            year=row["year"],
            ncm_code=row.get("coNcm"),
            country=row.get("country"),
            **metrics,
        )


class MonthlyTradeRecord(_FrozenModel):
    """A validated (year, month) row for one flow direction."""

    year: int
    month: int = Field(ge=1, le=12)
    fob: float = 0.0
    kg: float = 0.0

    @field_validator("fob", "kg", mode="before")
    @classmethod
    def coerce_metric(cls, v: Any) -> float:
        return parse_api_number(v)

    @property
    def period(self) -> YearMonth:
        return YearMonth(self.year, self.month)


# ---------------------------------------------------------------------------
# Annual series
# ---------------------------------------------------------------------------


class AnnualTradeRecord(_FrozenModel):
    """Consolidated exports + imports for one NCM code and calendar year."""

    year: int
    partial_through_month: int | None = None
    ncm_code: str = ""
    ncm_description: str = ""
    statistical_unit: str = ""

    export_fob: float = 0.0
    export_kg: float = 0.0
    export_statistic: float = 0.0

    import_fob: float = 0.0
    import_kg: float = 0.0
    import_statistic: float = 0.0
    import_cif: float = 0.0
    import_freight: float = 0.0
    import_insurance: float = 0.0

    balance_fob: float = 0.0
    balance_kg: float = 0.0
    balance_statistic: float = 0.0

    export_price_per_ton: float = 0.0
    import_price_per_ton: float = 0.0
    export_price_per_kg: float = 0.0
    import_price_per_kg: float = 0.0

    @property
    def is_partial_year(self) -> bool:
        return self.partial_through_month is not None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def year_label(self) -> str:
        if self.partial_through_month is None:
            return str(self.year)
        return PARTIAL_YEAR_LABEL.format(year=self.year, month=self.partial_through_month)

    def flow_totals(self, flow: FlowDirection) -> tuple[float, float, float]:
        """(fob, kg, price per ton) for one flow direction."""
        if flow == "import":
            return self.import_fob, self.import_kg, self.import_price_per_ton
        return self.export_fob, self.export_kg, self.export_price_per_ton

    def to_display_dict(self, *, resumed: bool = False) -> dict[str, Any]:
        row: dict[str, Any] = {
            "Year": self.year_label,
            "Exports (US$ FOB)": self.export_fob,
            "Exports (KG)": self.export_kg,
            "Imports (US$ FOB)": self.import_fob,
            "Imports (KG)": self.import_kg,
            "Trade balance (FOB)": self.balance_fob,
            "Trade balance (KG)": self.balance_kg,
        }
        if resumed:
            return row
        row.update({
            "NCM code": self.ncm_code,
            "NCM description": self.ncm_description,
            "Statistical unit": self.statistical_unit,
            "Exports (statistical qty)": self.export_statistic,
            "Imports (statistical qty)": self.import_statistic,
            "Trade balance (statistical qty)": self.balance_statistic,
            "Imports (CIF US$)": self.import_cif,
            "Imports (freight US$)": self.import_freight,
            "Imports (insurance US$)": self.import_insurance,
            "Avg export price (US$ FOB/ton)": self.export_price_per_ton,
            "Avg import price (US$ FOB/ton)": self.import_price_per_ton,
            "Avg export price (US$/KG)": self.export_price_per_kg,
            "Avg import price (US$/KG)": self.import_price_per_kg,
        })
        return row


class YearSummaryRow(_FrozenModel):
    """
    One year of a flow's totals and its change versus the prior year.

    A change of None means "not computable" (no prior year, zero baseline,
    or a partial year compared against a full one) and renders blank.
    """

    year: int
    year_label: str
    flow: FlowDirection
    fob: float
    kg: float
    price_per_ton: float
    fob_change_pct: float | None = None
    kg_change_pct: float | None = None
    price_change_pct: float | None = None

    def to_display_dict(self) -> dict[str, Any]:
        name = "Imports" if self.flow == "import" else "Exports"
        return {
            "Year": self.year_label,
            f"{name} (US$ FOB)": self.fob,
            f"Var. (%) {name} (US$ FOB)": format_percentage_pt_br(self.fob_change_pct),
            f"{name} (KG)": self.kg,
            f"Var. (%) {name} (KG)": format_percentage_pt_br(self.kg_change_pct),
            f"Avg {self.flow} price (US$ FOB/ton)": self.price_per_ton,
            f"Var. (%) avg {self.flow} price": format_percentage_pt_br(self.price_change_pct),
        }


# ---------------------------------------------------------------------------
# Monthly series
# ---------------------------------------------------------------------------


class MonthlyPoint(_FrozenModel):
    """One month of a gap-filled series; synthesized months carry zeros."""

    period: YearMonth
    kg: float = 0.0
    fob: float = 0.0


class RollingWindowPoint(_FrozenModel):
    """Trailing 12-month sums ending at `period`."""

    period: YearMonth
    rolling_kg: float
    rolling_fob: float


# ---------------------------------------------------------------------------
# Surge analysis
# ---------------------------------------------------------------------------

SurgeStatus = Literal[
    "ok",
    "out_of_range",
    "insufficient_history",
    "no_data",
    "invalid_window",
]


class SurgePeriodValues(_FrozenModel):
    label: str
    start: YearMonth
    end: YearMonth
    sum_kg: float
    year: int


class SurgeAnalysisResult(_FrozenModel):
    """
    Outcome of comparing a period's import weight against prior years.

    Anything other than status "ok" carries a human-readable `error`;
    percentage_change may be +inf when the prior average is zero.
    """

    status: SurgeStatus
    current_period: SurgePeriodValues | None = None
    previous_periods: list[SurgePeriodValues] = Field(default_factory=list)
    average_previous_kg: float = 0.0
    percentage_change: float = 0.0
    is_surge: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"


# ---------------------------------------------------------------------------
# Country breakdown
# ---------------------------------------------------------------------------


class CountryShare(_FrozenModel):
    country: str
    fob: float
    kg: float
    fob_share_pct: float = 0.0
    kg_share_pct: float = 0.0
