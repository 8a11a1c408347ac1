"""
formatting.py — pt-BR display helpers for numbers, months, and NCM codes.

Used by the CLI and by surge-period labels. These never raise: missing or
non-finite values render as a fixed placeholder.

Usage:
    from tradewatch_shared.formatting import format_decimal_pt_br

    format_integer_pt_br(259544)        # "259.544"
    format_decimal_pt_br(2595.449015)   # "2.595,45"
    format_percentage_pt_br(50.0)       # "50,00%"
    format_ncm_code("72085200")         # "7208.52.00"
"""

from __future__ import annotations

import math

_MONTH_NAMES_PT_BR: dict[int, str] = {
    1: "janeiro",
    2: "fevereiro",
    3: "março",
    4: "abril",
    5: "maio",
    6: "junho",
    7: "julho",
    8: "agosto",
    9: "setembro",
    10: "outubro",
    11: "novembro",
    12: "dezembro",
}


def _swap_separators(text: str) -> str:
    # "1,234.56" -> "1.234,56"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_integer_pt_br(value: float | None) -> str:
    if value is None or math.isnan(value):
        return "0"
    if math.isinf(value):
        return "N/A"
    return _swap_separators(f"{value:,.0f}")


def format_decimal_pt_br(value: float | None) -> str:
    if value is None or math.isnan(value):
        return "0,00"
    if math.isinf(value):
        return "N/A"
    return _swap_separators(f"{value:,.2f}")


def format_percentage_pt_br(value: float | None) -> str:
    """Blank for a non-computable change, "N/A" for an unbounded one."""
    if value is None or math.isnan(value):
        return ""
    if math.isinf(value):
        return "N/A"
    return f"{format_decimal_pt_br(value)}%"


def month_name_pt_br(month: int) -> str:
    return _MONTH_NAMES_PT_BR.get(month, str(month))


def format_ncm_code(ncm_code: str) -> str:
    """"12345678" -> "1234.56.78"; anything not 8 characters is returned as-is."""
    if ncm_code and len(ncm_code) == 8:
        return f"{ncm_code[:4]}.{ncm_code[4:6]}.{ncm_code[6:]}"
    return ncm_code
