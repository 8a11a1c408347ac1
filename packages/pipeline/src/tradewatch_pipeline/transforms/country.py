"""
transforms/country.py — Per-country share of a year's trade for one NCM code.
"""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl
import structlog

from tradewatch_shared.constants import UNKNOWN_COUNTRY
from tradewatch_shared.models.trade import CountryShare, TradeRecord

log = structlog.get_logger(__name__)


def _share(col: str) -> pl.Expr:
    total = pl.col(col).sum()
    return (
        pl.when(total > 0)
        .then((pl.col(col) / total * 100).round(2))
        .otherwise(0.0)
    )


def compute_country_shares(records: Sequence[TradeRecord]) -> list[CountryShare]:
    """
    Aggregate records by partner country and compute FOB and KG shares.

    Shares are percentages of the total across all countries, rounded to two
    decimals, and 0 when the total is not positive. Records without a
    country are grouped under UNKNOWN_COUNTRY. Sorted by FOB, descending.
    """
    if not records:
        return []

    frame = (
        pl.DataFrame(
            {
                "country": [r.country or UNKNOWN_COUNTRY for r in records],
                "fob": [r.fob for r in records],
                "kg": [r.kg for r in records],
            },
            schema={"country": pl.Utf8, "fob": pl.Float64, "kg": pl.Float64},
        )
        .group_by("country", maintain_order=True)
        .agg(pl.col("fob").sum(), pl.col("kg").sum())
        .with_columns(
            _share("fob").alias("fob_share_pct"),
            _share("kg").alias("kg_share_pct"),
        )
        .sort("fob", descending=True, maintain_order=True)
    )
    log.debug("country_shares_computed", countries=len(frame))
    return [CountryShare(**row) for row in frame.iter_rows(named=True)]
