"""
Retrying fetcher for notification polling.

Each attempt is bounded by a timeout. Failures are retried by tenacity with
exponential waits of base_delay, 2x and 4x (2 s, 4 s, 8 s by default). A
CancellationToken aborts both an in-flight attempt and a pending backoff.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from maritime_tracking.config import (
    NOTIFICATION_MAX_RETRIES,
    NOTIFICATION_RETRY_BASE_DELAY_SECONDS,
    NOTIFICATION_TIMEOUT_MS,
)
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.observability.telemetry import counter

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[Any]]
FetchFunc = Callable[[], Awaitable[Any]]


class FetchCancelled(Exception):
    """The fetch was cancelled through its CancellationToken."""


class CancellationToken:
    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


@dataclass
class FetchResult:
    ok: bool
    value: Any = None
    error: str | None = None
    attempts: int = 0
    cancelled: bool = False


class RetryingFetcher:
    def __init__(
        self,
        max_retries: int = NOTIFICATION_MAX_RETRIES,
        base_delay: float = NOTIFICATION_RETRY_BASE_DELAY_SECONDS,
        timeout: float = NOTIFICATION_TIMEOUT_MS / 1000,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.timeout = timeout
        self._sleep = sleep

    async def _race(self, awaitable: Awaitable[Any], token: CancellationToken | None, timeout: float | None) -> Any:
        """Await ``awaitable`` unless the token fires or ``timeout`` elapses first."""
        task = asyncio.ensure_future(awaitable)
        if token is None:
            try:
                return await asyncio.wait_for(task, timeout)
            except asyncio.TimeoutError as e:
                raise TimeoutError(f"Timeout após {timeout:g}s") from e

        waiter = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()

        if task in done:
            return task.result()

        task.cancel()
        if waiter in done or token.cancelled:
            raise FetchCancelled()
        raise TimeoutError(f"Timeout após {timeout:g}s")

    async def fetch(
        self,
        func: FetchFunc,
        token: CancellationToken | None = None,
        on_retry: Callable[[int, float], None] | None = None,
        on_attempt: Callable[[int], None] | None = None,
    ) -> FetchResult:
        """
        Call ``func`` until it succeeds, retries run out or ``token`` is cancelled.

        Args:
            func: Zero-argument coroutine function
            token: Optional cancellation token
            on_retry: Called with (retry number, delay) before each backoff
            on_attempt: Called with the attempt number before each call

        Returns:
            FetchResult; never raises for errors raised by ``func``
        """
        attempts = 0

        async def attempt() -> Any:
            nonlocal attempts
            if token is not None and token.cancelled:
                raise FetchCancelled()
            attempts += 1
            if on_attempt:
                on_attempt(attempts)
            try:
                return await self._race(func(), token, self.timeout)
            except FetchCancelled:
                raise
            except Exception as e:
                counter("notifications.fetch_failures")
                logger.warning("Notification fetch attempt %d failed: %s", attempts, str(e) or type(e).__name__)
                raise

        async def backoff(delay: float) -> None:
            await self._race(self._sleep(delay), token, None)

        def before_sleep(retry_state: RetryCallState) -> None:
            if on_retry and retry_state.next_action is not None:
                on_retry(retry_state.attempt_number, retry_state.next_action.sleep)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.base_delay),
            retry=retry_if_not_exception_type(FetchCancelled),
            sleep=backoff,
            before_sleep=before_sleep,
            reraise=True,
        )
        try:
            value = await retrying(attempt)
        except FetchCancelled:
            return FetchResult(ok=False, error="cancelled", attempts=attempts, cancelled=True)
        except Exception as e:
            return FetchResult(ok=False, error=str(e) or type(e).__name__, attempts=attempts)
        return FetchResult(ok=True, value=value, attempts=attempts)
