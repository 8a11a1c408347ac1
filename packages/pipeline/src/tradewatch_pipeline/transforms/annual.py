"""
transforms/annual.py — Consolidate export and import records into one row
per calendar year.

Both flows are summed per year with polars, outer-joined on year (a year seen
in only one flow still gets a row, the other flow at zero), and then the
derived balance and average-price columns are added. The row for the
last-known year is marked as a partial year.

Usage:
    from tradewatch_pipeline.transforms.annual import aggregate_annual

    rows = aggregate_annual(
        exports, imports,
        ncm_code="72085200",
        details=NcmDetails(description="...", unit="KG"),
        last_update=LastUpdate(year=2025, month=5),
    )
    rows[-1].year_label   # "2025 (through month 05)"
"""

from __future__ import annotations

from collections.abc import Sequence

import polars as pl
import structlog

from tradewatch_shared.models.trade import (
    AnnualTradeRecord,
    LastUpdate,
    NcmDetails,
    TradeRecord,
)

log = structlog.get_logger(__name__)

# TradeRecord field -> output column, per flow
_EXPORT_COLUMNS: dict[str, str] = {
    "fob": "export_fob",
    "kg": "export_kg",
    "statistic": "export_statistic",
}
_IMPORT_COLUMNS: dict[str, str] = {
    "fob": "import_fob",
    "kg": "import_kg",
    "statistic": "import_statistic",
    "cif": "import_cif",
    "freight": "import_freight",
    "insurance": "import_insurance",
}
_METRIC_COLUMNS = [*_EXPORT_COLUMNS.values(), *_IMPORT_COLUMNS.values()]


def _yearly_sums(records: Sequence[TradeRecord], columns: dict[str, str]) -> pl.DataFrame:
    """Sum the selected metrics per year for one flow."""
    schema: dict[str, pl.DataType] = {"year": pl.Int64()}
    schema.update({field: pl.Float64() for field in columns})
    frame = pl.DataFrame(
        [{"year": r.year, **{field: getattr(r, field) for field in columns}} for r in records],
        schema=schema,
    )
    return frame.group_by("year").agg(
        [pl.col(field).sum().alias(out) for field, out in columns.items()]
    )


def _price_per_ton(fob: str, kg: str) -> pl.Expr:
    return pl.when(pl.col(kg) > 0).then(pl.col(fob) / (pl.col(kg) / 1000)).otherwise(0.0)


def _price_per_kg(fob: str, kg: str) -> pl.Expr:
    return pl.when(pl.col(kg) != 0).then(pl.col(fob) / pl.col(kg)).otherwise(0.0)


def annual_frame(
    exports: Sequence[TradeRecord],
    imports: Sequence[TradeRecord],
) -> pl.DataFrame:
    """
    Year-level DataFrame with summed metrics, balances, and price ratios.

    Columns: year, export_*, import_*, balance_*, *_price_per_ton, *_price_per_kg.
    Sorted ascending by year; every metric column is non-null.
    """
    combined = (
        _yearly_sums(exports, _EXPORT_COLUMNS)
        .join(_yearly_sums(imports, _IMPORT_COLUMNS), on="year", how="full", coalesce=True)
        .with_columns(pl.col(_METRIC_COLUMNS).fill_null(0.0))
        .sort("year")
    )
    return combined.with_columns(
        (pl.col("export_fob") - pl.col("import_fob")).alias("balance_fob"),
        (pl.col("export_kg") - pl.col("import_kg")).alias("balance_kg"),
        (pl.col("export_statistic") - pl.col("import_statistic")).alias("balance_statistic"),
        _price_per_ton("export_fob", "export_kg").alias("export_price_per_ton"),
        _price_per_ton("import_fob", "import_kg").alias("import_price_per_ton"),
        _price_per_kg("export_fob", "export_kg").alias("export_price_per_kg"),
        _price_per_kg("import_fob", "import_kg").alias("import_price_per_kg"),
    )


def aggregate_annual(
    exports: Sequence[TradeRecord],
    imports: Sequence[TradeRecord],
    *,
    ncm_code: str,
    details: NcmDetails | None = None,
    last_update: LastUpdate | None = None,
) -> list[AnnualTradeRecord]:
    """
    Merge per-flow records into one AnnualTradeRecord per year.

    Args:
        exports:     Export records for the NCM code, any number per year.
        imports:     Import records for the NCM code, any number per year.
        ncm_code:    Classification code stamped on every row.
        details:     Description and statistical unit of the code.
        last_update: Last published (year, month); that year's row is
                     labelled as a partial year through that month.

    Returns:
        Rows ascending by year. Pure: the same input gives the same output.
    """
    details = details or NcmDetails()
    partial_year = last_update.year if last_update and last_update.month else None

    frame = annual_frame(exports, imports)
    rows = [
        AnnualTradeRecord(
            ncm_code=ncm_code,
            ncm_description=details.description or "",
            statistical_unit=details.unit or "",
            partial_through_month=(
                last_update.month if last_update and row["year"] == partial_year else None
            ),
            **row,
        )
        for row in frame.iter_rows(named=True)
    ]
    log.debug(
        "annual_aggregated",
        ncm_code=ncm_code,
        export_records=len(exports),
        import_records=len(imports),
        years=len(rows),
    )
    return rows


def merge_annual_series(*series: Sequence[AnnualTradeRecord]) -> list[AnnualTradeRecord]:
    """Concatenate historical and current-year outputs, ascending by year."""
    return sorted((row for rows in series for row in rows), key=lambda r: r.year)
