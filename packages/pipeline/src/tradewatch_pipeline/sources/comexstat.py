"""
sources/comexstat.py — ComexStat (Brazilian foreign-trade statistics) adapter.

Wraps the public ComexStat REST API:
  POST /general               — trade statistics for a flow, period and filters
  GET  /general/dates/updated — last month with published data
  GET  /tables/ncm/{code}     — NCM description
  GET  /tables/ncm            — full NCM table (statistical units)

Requests that fail with HTTP 429 or a transport error are retried with the
delays from settings; any other HTTP error fails the request at once. The
public fetch_* helpers never raise for upstream failures: they log and return
an empty result, which callers treat as "no data".

Usage:
    source = ComexStatSource()
    update = await source.fetch_last_update()
    exports = await source.fetch_records(
        "export", YearMonth(2004, 1), YearMonth(2024, 12), "72085200",
        metrics=EXPORT_METRICS, details=["ncm"],
    )
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from tradewatch_shared.config import settings
from tradewatch_shared.constants import COUNTRY_METRICS, MONTHLY_METRICS, FlowDirection
from tradewatch_shared.models.trade import CountryShare, LastUpdate, TradeRecord
from tradewatch_shared.time_utils import YearMonth
from tradewatch_pipeline.sources.base import BaseSource, RawRows
from tradewatch_pipeline.transforms.country import compute_country_shares
from tradewatch_pipeline.transforms.time_series import (
    MonthlyValidationResult,
    validate_monthly_records,
)
from tradewatch_pipeline.utils.retry import with_retry

log = structlog.get_logger(__name__)

DESCRIPTION_NOT_FOUND = "Description not found"
DESCRIPTION_ERROR = "Error fetching description"
UNIT_NOT_FOUND = "Unit not found"
UNIT_ERROR = "Error fetching unit"


class RateLimitedError(Exception):
    """ComexStat answered 429 Too Many Requests."""


_RETRYABLE = (httpx.TransportError, RateLimitedError)
# Everything an upstream failure can surface as once retries are spent
_FETCH_ERRORS = (
    httpx.HTTPError,
    RateLimitedError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
)


def ncm_filter(ncm_code: str) -> list[dict[str, Any]]:
    return [{"filter": "ncm", "values": [ncm_code]}]


class ComexStatSource(BaseSource):
    """Fetches trade statistics and reference tables from ComexStat."""

    name = "ComexStat"

    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        super().__init__()
        self._base_url = (base_url or settings.comexstat_base_url).rstrip("/")
        self._timeout = timeout or settings.request_timeout

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_status(response: httpx.Response, url: str) -> None:
        if response.status_code == 429:
            raise RateLimitedError(f"429 Too Many Requests for {url}")
        response.raise_for_status()

    @with_retry(retry_on=_RETRYABLE)
    async def _get_json(self, path: str) -> Any:
        url = f"{self._base_url}{path}"
        self._log.debug("get", url=url)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.get(url)
            self._check_status(response, url)
            return response.json()

    @with_retry(retry_on=_RETRYABLE)
    async def _post_general(self, body: dict[str, Any]) -> RawRows:
        url = f"{self._base_url}/general"
        self._log.debug("post", url=url, flow=body["flow"], period=body["period"])
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(url, json=body)
            self._check_status(response, url)
            payload = response.json()
        return list((payload.get("data") or {}).get("list") or [])

    # ------------------------------------------------------------------
    # BaseSource interface
    # ------------------------------------------------------------------

    async def extract(
        self,
        *,
        flow: FlowDirection,
        period_from: YearMonth,
        period_to: YearMonth,
        ncm_code: str,
        metrics: Sequence[str],
        details: Sequence[str] = (),
        month_detail: bool = False,
        **kwargs: Any,
    ) -> RawRows:
        """POST one /general query and return its data.list rows."""
        body = {
            "flow": flow,
            "monthDetail": month_detail,
            "period": {"from": period_from.label(), "to": period_to.label()},
            "filters": ncm_filter(ncm_code),
            "details": list(details),
            "metrics": list(metrics),
        }
        return await self._post_general(body)

    def transform(self, raw: RawRows) -> list[TradeRecord]:
        """Rows without a usable year are dropped; metrics are coerced to floats."""
        records: list[TradeRecord] = []
        dropped = 0
        for row in raw:
            try:
                records.append(TradeRecord.from_api_row(row))
            except (KeyError, ValidationError):
                dropped += 1
        if dropped:
            self._log.warning("rows_dropped", dropped=dropped, kept=len(records))
        return records

    async def get_metadata(self) -> dict[str, Any]:
        update = await self.fetch_last_update()
        return {
            "source_name": self.name,
            "base_url": self._base_url,
            "last_updated": update.updated,
            "last_period": update.period.label() if update.period else None,
            "description": "Brazilian foreign-trade statistics (MDIC ComexStat)",
        }

    # ------------------------------------------------------------------
    # Public fetch helpers
    # ------------------------------------------------------------------

    async def fetch_records(
        self,
        flow: FlowDirection,
        period_from: YearMonth,
        period_to: YearMonth,
        ncm_code: str,
        *,
        metrics: Sequence[str],
        details: Sequence[str] = (),
        month_detail: bool = False,
    ) -> list[TradeRecord]:
        """Trade records for one query, or [] if the request ultimately fails."""
        try:
            records = await self.run(
                flow=flow,
                period_from=period_from,
                period_to=period_to,
                ncm_code=ncm_code,
                metrics=metrics,
                details=details,
                month_detail=month_detail,
            )
        except _FETCH_ERRORS as exc:
            self._log.warning(
                "fetch_records_failed",
                flow=flow,
                period=f"{period_from}..{period_to}",
                error=str(exc),
            )
            return []
        return list(records)  # type: ignore[arg-type]

    async def fetch_monthly(
        self,
        flow: FlowDirection,
        start: YearMonth,
        end: YearMonth,
        ncm_code: str,
        *,
        metrics: Sequence[str] = MONTHLY_METRICS,
    ) -> MonthlyValidationResult:
        """
        Month-level records from start to end, fetched in one request per year.

        A failed year is logged and skipped; the other years are still
        returned. Rows with an invalid year or month are discarded and counted.
        """
        batches = [
            (
                YearMonth(year, start.month if year == start.year else 1),
                YearMonth(year, end.month if year == end.year else 12),
            )
            for year in range(start.year, end.year + 1)
        ]
        results = await asyncio.gather(
            *(
                self.extract(
                    flow=flow,
                    period_from=batch_from,
                    period_to=batch_to,
                    ncm_code=ncm_code,
                    metrics=metrics,
                    month_detail=True,
                )
                for batch_from, batch_to in batches
            ),
            return_exceptions=True,
        )

        rows: RawRows = []
        failed_years: list[int] = []
        for (batch_from, _), result in zip(batches, results):
            if isinstance(result, BaseException):
                if not isinstance(result, _FETCH_ERRORS):
                    raise result
                failed_years.append(batch_from.year)
                self._log.warning(
                    "monthly_batch_failed",
                    flow=flow,
                    year=batch_from.year,
                    error=str(result),
                )
                continue
            rows.extend(result)

        validated = validate_monthly_records(rows)
        self._log.info(
            "monthly_fetch_complete",
            flow=flow,
            period=f"{start}..{end}",
            raw_rows=len(rows),
            valid_rows=len(validated.records),
            failed_years=failed_years,
        )
        return validated

    async def fetch_last_update(self) -> LastUpdate:
        """Last published (year, month); an all-None LastUpdate on failure."""
        try:
            payload = await self._get_json("/general/dates/updated")
            data = payload["data"]
            return LastUpdate(
                updated=data.get("updated"),
                year=data.get("year"),
                month=data.get("monthNumber"),
            )
        except _FETCH_ERRORS as exc:
            self._log.warning("last_update_failed", error=str(exc))
            return LastUpdate()

    async def fetch_ncm_description(self, ncm_code: str) -> str | None:
        if not ncm_code:
            return None
        try:
            payload = await self._get_json(f"/tables/ncm/{ncm_code}")
        except _FETCH_ERRORS as exc:
            self._log.warning("ncm_description_failed", ncm_code=ncm_code, error=str(exc))
            return DESCRIPTION_ERROR
        entries = payload.get("data") or []
        if not entries:
            return DESCRIPTION_NOT_FOUND
        return entries[0].get("text") or DESCRIPTION_NOT_FOUND

    async def fetch_ncm_unit(self, ncm_code: str) -> str | None:
        """Statistical unit of an NCM code, looked up in the full NCM table."""
        if not ncm_code:
            return None
        try:
            payload = await self._get_json("/tables/ncm")
            table = payload["data"]["list"]
        except _FETCH_ERRORS as exc:
            self._log.warning("ncm_unit_failed", ncm_code=ncm_code, error=str(exc))
            return UNIT_ERROR
        for entry in table:
            if entry.get("coNcm") == ncm_code:
                return entry.get("unit")
        return UNIT_NOT_FOUND

    async def fetch_country_shares(
        self,
        flow: FlowDirection,
        year: int,
        ncm_code: str,
    ) -> list[CountryShare]:
        """Partner-country breakdown of one calendar year, largest FOB first."""
        records = await self.fetch_records(
            flow,
            YearMonth(year, 1),
            YearMonth(year, 12),
            ncm_code,
            metrics=COUNTRY_METRICS,
            details=["country"],
        )
        return compute_country_shares(records)
