"""
sources/base.py — Abstract base class for all data source adapters.

Each concrete source must implement:
  extract()      — fetch raw rows (API payload rows or worksheet rows)
  transform()    — convert raw rows into validated pydantic records
  get_metadata() — return dict with source info for logging

The run() method orchestrates extract → transform → return and handles
timing/logging automatically. Callers use run() (or a source's own fetch
helpers built on it) rather than the individual methods.

Raw rows stay as plain dicts until transform(): ComexStat mixes numbers and
pt-BR formatted strings within one column, so the rows are not loaded into a
typed DataFrame before each value has been coerced.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import structlog
from pydantic import BaseModel

log = structlog.get_logger(__name__)

RawRows = list[dict[str, Any]]


class BaseSource(ABC):
    """Abstract base for all tradewatch data source adapters."""

    # Override in subclass — used for logging
    name: str = "unknown"

    def __init__(self) -> None:
        self._log = log.bind(source_name=self.name)

    # ------------------------------------------------------------------
    # Abstract interface — subclasses must implement all three
    # ------------------------------------------------------------------

    @abstractmethod
    async def extract(self, **kwargs: Any) -> RawRows:
        """
        Fetch raw rows from the external source.

        Implementations should:
        - Make HTTP calls via httpx, decorated with @with_retry
        - Return rows with their original keys preserved

        Args:
            **kwargs: Source-specific parameters (flow, period, path, ...)
        """
        ...

    @abstractmethod
    def transform(self, raw: RawRows) -> Sequence[BaseModel]:
        """
        Validate raw rows into domain records.

        Rows that cannot be validated are dropped and counted in the log;
        numeric coercion never raises.
        """
        ...

    @abstractmethod
    async def get_metadata(self) -> dict[str, Any]:
        """
        Return source-level metadata for observability.

        Should include at minimum: source_name, description.
        """
        ...

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    async def run(self, **kwargs: Any) -> Sequence[BaseModel]:
        """
        Extract + transform in sequence with timing and structured logging.

        Args:
            **kwargs: Forwarded to extract().

        Returns:
            Validated records.

        Raises:
            Any exception from extract() or transform() after logging it.
        """
        run_log = self._log.bind(**{k: str(v) for k, v in kwargs.items()})
        run_log.debug("source_run_start")

        t0 = time.monotonic()
        try:
            raw = await self.extract(**kwargs)
            run_log.debug(
                "extract_complete",
                raw_rows=len(raw),
                duration_ms=int((time.monotonic() - t0) * 1000),
            )

            result = self.transform(raw)
            run_log.info(
                "source_run_complete",
                total_duration_ms=int((time.monotonic() - t0) * 1000),
                raw_rows=len(raw),
                output_rows=len(result),
            )
            return result

        except Exception as exc:
            run_log.error(
                "source_run_failed",
                error=str(exc),
                duration_ms=int((time.monotonic() - t0) * 1000),
                exc_info=True,
            )
            raise
