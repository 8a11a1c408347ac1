"""
coercion.py — Turn heterogeneous raw metric values into finite floats.

ComexStat returns metrics as JSON numbers, as pt-BR formatted strings
("1.234,56"), or omits them entirely. Every metric crosses this boundary
before it reaches a record model, so downstream code only ever sees finite
floats.

Usage:
    from tradewatch_shared.coercion import parse_api_number

    parse_api_number("1.234,56")   # 1234.56
    parse_api_number(float("nan")) # 0.0
    parse_api_number(None)         # 0.0
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from typing import Any

# Longest leading float literal, the way a lenient float parser reads "12abc".
_LEADING_FLOAT_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _finite_or_zero(value: float) -> float:
    return value if math.isfinite(value) else 0.0


def parse_api_number(value: Any) -> float:
    """
    Coerce any raw value to a finite float. Never raises.

    - int/float: returned as float; NaN and ±inf become 0.
    - str: thousands separators (".") are removed and the decimal comma
      becomes a point, then the leading numeric part is parsed.
    - anything else (None, bool, containers, ...): 0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            return _finite_or_zero(float(value))
        except OverflowError:
            return 0.0
    if isinstance(value, str):
        cleaned = value.replace(".", "").replace(",", ".", 1)
        m = _LEADING_FLOAT_RE.match(cleaned)
        if not m:
            return 0.0
        return _finite_or_zero(float(m.group(1)))
    return 0.0


def coerce_metrics(row: Mapping[str, Any], fields: Iterable[str]) -> dict[str, float]:
    """Apply parse_api_number to a fixed set of keys; absent keys become 0."""
    return {name: parse_api_number(row.get(name)) for name in fields}
