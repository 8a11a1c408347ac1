"""
cli.py — Click CLI entrypoint.

Usage:
    tradewatch report 72085200
    tradewatch report 72085200 --surge-start 2024-03 --surge-end 2024-05
    tradewatch report 72085200 --nfe nfe.xlsx --cgim cgim.xlsx --country-year 2024
    tradewatch --log-level DEBUG report 72085200 --json
"""

from __future__ import annotations

import asyncio
import math
from pathlib import Path
from typing import Any

import click
import structlog

from tradewatch_shared.config import settings
from tradewatch_shared.formatting import (
    format_decimal_pt_br,
    format_integer_pt_br,
    format_ncm_code,
    format_percentage_pt_br,
)
from tradewatch_shared.time_utils import YearMonth
from tradewatch_pipeline.pipelines.trade_report import TradeReport
from tradewatch_pipeline.pipelines.trade_report import run as run_report
from tradewatch_pipeline.utils.logging import configure_logging

log = structlog.get_logger(__name__)


class YearMonthParam(click.ParamType):
    name = "YYYY-MM"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> YearMonth:
        if isinstance(value, YearMonth):
            return value
        try:
            return YearMonth.parse(value)
        except ValueError as exc:
            self.fail(str(exc), param, ctx)


YEAR_MONTH = YearMonthParam()


@click.group()
@click.option(
    "--log-level",
    default=settings.log_level,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
def main(log_level: str) -> None:
    """tradewatch: Brazilian foreign-trade analysis for one NCM code."""
    configure_logging(log_level=log_level)


@main.command()
@click.argument("ncm_code")
@click.option("--surge-start", type=YEAR_MONTH, help="First month of the surge window.")
@click.option("--surge-end", type=YEAR_MONTH, help="Last month of the surge window.")
@click.option("--nfe", "nfe_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="NFE workbook (sheet 'Dados').")
@click.option("--cgim", "cgim_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="CGIM/DINTE responsibility workbook.")
@click.option("--country-year", type=int, help="Year for the per-country breakdown.")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
def report(
    ncm_code: str,
    surge_start: YearMonth | None,
    surge_end: YearMonth | None,
    nfe_path: Path | None,
    cgim_path: Path | None,
    country_year: int | None,
    as_json: bool,
) -> None:
    """Build the trade report for NCM_CODE (8 digits)."""
    ncm_code = ncm_code.replace(".", "").strip()
    if not (ncm_code.isdigit() and len(ncm_code) == 8):
        raise click.BadParameter("NCM code must have 8 digits", param_hint="NCM_CODE")
    if (surge_start is None) != (surge_end is None):
        raise click.UsageError("--surge-start and --surge-end must be given together")

    log.info("report_requested", ncm_code=ncm_code)
    result = asyncio.run(
        run_report(
            ncm_code,
            surge_start=surge_start,
            surge_end=surge_end,
            nfe_path=nfe_path,
            cgim_path=cgim_path,
            country_year=country_year,
        )
    )

    if as_json:
        click.echo(result.model_dump_json(indent=2))
    else:
        click.echo(render_report(result))


# ---------------------------------------------------------------------------
# Plain-text rendering
# ---------------------------------------------------------------------------


def _table(title: str, rows: list[dict[str, Any]]) -> list[str]:
    lines = ["", title, "-" * len(title)]
    if not rows:
        return [*lines, "  (no data)"]
    headers = list(rows[0])
    cells = [[_cell(row[h]) for h in headers] for row in rows]
    widths = [max(len(h), *(len(c[i]) for c in cells)) for i, h in enumerate(headers)]
    lines.append("  ".join(h.ljust(w) for h, w in zip(headers, widths)))
    lines.extend("  ".join(c.rjust(w) for c, w in zip(row, widths)) for row in cells)
    return lines


def _cell(value: Any) -> str:
    if isinstance(value, float):
        if math.isinf(value) or abs(value) >= 1000:
            return format_integer_pt_br(value)
        return format_decimal_pt_br(value)
    return "" if value is None else str(value)


def render_report(report: TradeReport) -> str:
    update = report.last_update
    lines = [
        f"NCM {format_ncm_code(report.ncm_code)}: {report.details.description or ''}",
        f"Statistical unit: {report.details.unit or ''}",
        f"Data published through: {update.period or 'unknown'}",
    ]

    lines += _table("Annual trade", [r.to_display_dict(resumed=True) for r in report.annual])
    lines += _table("Imports, year over year", [r.to_display_dict() for r in report.import_summary])
    lines += _table("Exports, year over year", [r.to_display_dict() for r in report.export_summary])

    if report.country_year is not None:
        for flow, shares in (("Exports", report.export_countries), ("Imports", report.import_countries)):
            lines += _table(
                f"{flow} by country, {report.country_year}",
                [
                    {
                        "Country": s.country,
                        "US$ FOB": s.fob,
                        "KG": s.kg,
                        "FOB share": format_percentage_pt_br(s.fob_share_pct),
                        "KG share": format_percentage_pt_br(s.kg_share_pct),
                    }
                    for s in shares
                ],
            )

    lines += _table(
        "Imports, trailing 12 months",
        [
            {"Month": p.period.label(), "KG": p.rolling_kg, "US$ FOB": p.rolling_fob}
            for p in report.rolling_imports
        ],
    )

    if report.surge is not None:
        lines += _surge_lines(report)

    if report.sales or report.consumption:
        lines += _table(
            "Sales (NFE)",
            [
                {
                    "Year": r.year,
                    "Total sales (KG)": r.total_sales,
                    "Δ total (%)": format_percentage_pt_br(r.total_sales_change_pct),
                    "Domestic sales (KG)": r.domestic_sales,
                    "Δ domestic (%)": format_percentage_pt_br(r.domestic_sales_change_pct),
                    "Exports (KG)": r.exports,
                    "Δ exports (%)": format_percentage_pt_br(r.exports_change_pct),
                }
                for r in report.sales
            ],
        )
        lines += _table(
            "Apparent national consumption (NFE)",
            [
                {
                    "Year": r.year,
                    "Domestic sales (KG)": r.domestic_sales,
                    "Δ domestic (%)": format_percentage_pt_br(r.domestic_sales_change_pct),
                    "Imports (KG)": r.imports,
                    "Δ imports (%)": format_percentage_pt_br(r.imports_change_pct),
                    "CNA (KG)": r.apparent_consumption,
                    "Δ CNA (%)": format_percentage_pt_br(r.apparent_consumption_change_pct),
                    "Import coefficient (%)": format_percentage_pt_br(r.import_penetration_pct),
                }
                for r in report.consumption
            ],
        )

    if report.cgim is not None:
        info = report.cgim
        lines += [
            "",
            "Responsibility (CGIM/DINTE)",
            f"  Department: {info.department or ''}",
            f"  General coordination: {info.general_coordination or ''}",
            f"  Sectors: {info.sectors or ''} / {info.subsectors or ''}",
        ]
    if report.entity_contacts:
        lines += _table(
            "Industry associations",
            [
                {
                    "Sheet": c.sheet,
                    "Entity": c.entity_acronym or c.entity_name,
                    "Director": c.director_name,
                    "E-mail": c.email,
                    "Phone": c.phone,
                }
                for c in report.entity_contacts
            ],
        )

    for warning in report.warnings:
        lines.append(f"warning: {warning}")
    return "\n".join(lines)


def _surge_lines(report: TradeReport) -> list[str]:
    surge = report.surge
    assert surge is not None
    lines = ["", "Import surge screen", "-------------------"]
    if not surge.ok:
        return [*lines, f"  {surge.error}"]
    current = surge.current_period
    assert current is not None
    lines.append(f"  Current period {current.label}: {format_integer_pt_br(current.sum_kg)} kg")
    for period in surge.previous_periods:
        lines.append(f"  {period.label}: {format_integer_pt_br(period.sum_kg)} kg")
    lines.append(f"  Average of prior periods: {format_integer_pt_br(surge.average_previous_kg)} kg")
    lines.append(f"  Change: {format_percentage_pt_br(surge.percentage_change)}")
    lines.append(f"  Surge: {'yes' if surge.is_surge else 'no'}")
    return lines


if __name__ == "__main__":
    main()
