"""
models/spreadsheet.py — Pydantic models for user-supplied workbooks.

NfeRow mirrors one row of the invoice/production workbook ("Dados" sheet,
one row per NCM code and year). SalesRow and ConsumptionRow are the two
derived year-over-year series. CgimNcmInfo and EntityContact come from the
CGIM/DINTE responsibility workbook.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from tradewatch_shared.coercion import parse_api_number

# Workbook column -> NfeRow field
NFE_COLUMNS: dict[str, str] = {
    "ano": "year",
    "ncm_8d": "ncm_code",
    "valor_producao": "production_value",
    "qtd_tributavel_producao": "production_qty",
    "valor_exp": "export_value",
    "qtd_tributavel_exp": "export_qty",
    "valor_cif_imp_dolar": "import_cif_usd",
    "qtd_tributavel_imp": "import_qty",
    "cambio_dolar_medio": "average_exchange_rate",
    "valor_cif_imp_reais": "import_cif_brl",
    "coeficiente_penetracao_imp_valor": "import_penetration_value",
    "coeficiente_penetracao_imp_qtd": "import_penetration_qty",
    "coeficiente_exp_valor": "export_coefficient_value",
    "coeficiente_exp_qtd": "export_coefficient_qty",
    "consumo_nacional_aparente_valor": "apparent_consumption_value",
    "consumo_nacional_aparente_qtd": "apparent_consumption_qty",
    "disponibilidade_total_valor": "total_availability_value",
    "disponibilidade_total_qtd": "total_availability_qty",
}
DOMESTIC_SALES_COLUMN = "Vendas internas (KG)"

_NFE_METRICS = [f for f in NFE_COLUMNS.values() if f not in ("year", "ncm_code")]

CGIM_COLUMNS: dict[str, str] = {
    "NCM": "ncm_code",
    "Departamento Responsável": "department",
    "Coordenação-Geral Responsável": "general_coordination",
    "Agrupamento": "grouping",
    "Setores": "sectors",
    "Subsetores": "subsectors",
    "Produtos": "products",
}

ENTITY_COLUMNS: dict[str, str] = {
    "NCM": "ncm_code",
    "Sigla Entidade": "entity_acronym",
    "Entidade": "entity_name",
    "Nome do Dirigente": "director_name",
    "Cargo": "director_role",
    "E-mail": "email",
    "Telefone": "phone",
    "Celular": "mobile",
    "Contato Importante": "key_contact",
    "Cargo (Contato Importante)": "key_contact_role",
    "E-mail (Contato Importante)": "key_contact_email",
    "Telefone (Contato Importante)": "key_contact_phone",
    "Celular (Contato Importante)": "key_contact_mobile",
}


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def ncm_text(value: Any) -> str:
    """Normalize an NCM cell; Excel stores codes as numbers and drops the leading zero."""
    text = str(value).strip()
    if text.endswith(".0"):
        text = text[:-2]
    return text.zfill(8) if text.isdigit() and len(text) < 8 else text


class NfeRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    ncm_code: str
    production_value: float = 0.0
    production_qty: float = 0.0
    export_value: float = 0.0
    export_qty: float = 0.0
    import_cif_usd: float = 0.0
    import_qty: float = 0.0
    average_exchange_rate: float = 0.0
    import_cif_brl: float = 0.0
    import_penetration_value: float = 0.0
    import_penetration_qty: float = 0.0
    export_coefficient_value: float = 0.0
    export_coefficient_qty: float = 0.0
    apparent_consumption_value: float = 0.0
    apparent_consumption_qty: float = 0.0
    total_availability_value: float = 0.0
    total_availability_qty: float = 0.0
    # None until derived as production - exports; see ensure_domestic_sales()
    domestic_sales_qty: float | None = None

    @field_validator(*_NFE_METRICS, mode="before")
    @classmethod
    def coerce_metric(cls, v: Any) -> float:
        return parse_api_number(v)

    @field_validator("domestic_sales_qty", mode="before")
    @classmethod
    def coerce_optional(cls, v: Any) -> float | None:
        return None if v is None else parse_api_number(v)

    @field_validator("ncm_code", mode="before")
    @classmethod
    def ncm_as_text(cls, v: Any) -> str:
        return ncm_text(v)

    @classmethod
    def from_sheet_row(cls, row: dict[str, Any]) -> NfeRow:
        data: dict[str, Any] = {
            field: row.get(column) for column, field in NFE_COLUMNS.items()
        }
        if row.get(DOMESTIC_SALES_COLUMN) is not None:
            data["domestic_sales_qty"] = row[DOMESTIC_SALES_COLUMN]
        return cls(**data)


class SalesRow(BaseModel):
    """Total / domestic / export sales with year-over-year change (%)."""

    model_config = ConfigDict(frozen=True)

    year: int
    total_sales: float
    total_sales_change_pct: float | None = None
    domestic_sales: float
    domestic_sales_change_pct: float | None = None
    exports: float
    exports_change_pct: float | None = None


class ConsumptionRow(BaseModel):
    """Domestic sales / imports / apparent national consumption (CNA)."""

    model_config = ConfigDict(frozen=True)

    year: int
    domestic_sales: float
    domestic_sales_change_pct: float | None = None
    imports: float
    imports_change_pct: float | None = None
    apparent_consumption: float
    apparent_consumption_change_pct: float | None = None
    import_penetration_pct: float


class CgimNcmInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    ncm_code: str
    department: str | None = None
    general_coordination: str | None = None
    grouping: str | None = None
    sectors: str | None = None
    subsectors: str | None = None
    products: str | None = None

    @classmethod
    def from_sheet_row(cls, row: dict[str, Any]) -> CgimNcmInfo:
        data = {field: _text(row.get(column)) for column, field in CGIM_COLUMNS.items()}
        data["ncm_code"] = ncm_text(row.get("NCM", ""))
        return cls(**data)


class EntityContact(BaseModel):
    model_config = ConfigDict(frozen=True)

    sheet: str
    ncm_code: str
    entity_acronym: str | None = None
    entity_name: str | None = None
    director_name: str | None = None
    director_role: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile: str | None = None
    key_contact: str | None = None
    key_contact_role: str | None = None
    key_contact_email: str | None = None
    key_contact_phone: str | None = None
    key_contact_mobile: str | None = None

    @classmethod
    def from_sheet_row(cls, sheet: str, row: dict[str, Any]) -> EntityContact:
        data = {field: _text(row.get(column)) for column, field in ENTITY_COLUMNS.items()}
        data["ncm_code"] = ncm_text(row.get("NCM", ""))
        return cls(sheet=sheet, **data)
