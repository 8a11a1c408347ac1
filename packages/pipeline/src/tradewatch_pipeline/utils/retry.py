"""
utils/retry.py — Exponential-backoff retry decorator for async HTTP calls.

Uses tenacity under the hood. Each retry is logged with structlog. Attempts
and delays default to the values in settings, read when the decorated
function is called, so they can be tuned per process (or in tests) without
re-importing the decorated module.

Usage:
    from tradewatch_pipeline.utils.retry import with_retry

    @with_retry(retry_on=(httpx.TransportError,))
    async def fetch(url: str) -> dict:
        ...

    # Explicit policy: 5 attempts, 0.5 s / 1 s / 2 s / 4 s waits
    @with_retry(max_attempts=5, base_delay=0.5)
    async def call_api() -> dict: ...
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tradewatch_shared.config import settings

log = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Coroutine[Any, Any, Any]])


def with_retry(
    max_attempts: int | None = None,
    base_delay: float | None = None,
    max_delay: float | None = None,
    retry_on: type[Exception] | tuple[type[Exception], ...] = Exception,
) -> Callable[[F], F]:
    """
    Decorator that retries an async function with exponential backoff.

    Delays: base_delay * 2^(attempt-1), capped at max_delay. The last
    exception is re-raised once attempts are exhausted; exceptions outside
    `retry_on` propagate immediately.

    Args:
        max_attempts: Total attempts (default: settings.retry_attempts).
        base_delay:   Initial delay in seconds (default: settings.retry_base_delay).
        max_delay:    Delay cap in seconds (default: settings.retry_max_delay).
        retry_on:     Exception type(s) that trigger a retry.
    """

    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempts = max_attempts or settings.retry_attempts
            attempt_log = log.bind(function=fn.__qualname__, max_attempts=attempts)

            def log_retry(state: RetryCallState) -> None:
                outcome = state.outcome
                attempt_log.warning(
                    "retry_scheduled",
                    failed_attempt=state.attempt_number,
                    sleep_s=state.next_action.sleep if state.next_action else None,
                    last_error=str(outcome.exception()) if outcome else None,
                )

            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=wait_exponential(
                    multiplier=settings.retry_base_delay if base_delay is None else base_delay,
                    max=settings.retry_max_delay if max_delay is None else max_delay,
                ),
                retry=retry_if_exception_type(retry_on),
                before_sleep=log_retry,
                reraise=True,
            ):
                with attempt:
                    return await fn(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
