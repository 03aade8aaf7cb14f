"""
Notification poller.

State machine per poll: IDLE -> FETCHING -> (success | RETRY_WAIT -> FETCHING)
-> IDLE. A successful poll resets the interval; a poll that exhausts its
retries surfaces a generic error and doubles the interval, and polling goes
on. Starting a new poll cancels the one in flight.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any

import httpx

from maritime_tracking.config import (
    NOTIFICATION_ERROR_MESSAGE,
    NOTIFICATION_POLLING_INTERVAL_MS,
    NOTIFICATION_TIMEOUT_MS,
)
from maritime_tracking.notifications.fetcher import CancellationToken, RetryingFetcher, SleepFunc
from maritime_tracking.notifications.models import CommentNotification
from maritime_tracking.notifications.monitor import NotificationsMonitor
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.tracking.models import utc_now

logger = get_logger(__name__)

NotificationSource = Callable[[datetime | None], Awaitable[list[CommentNotification]]]


class PollerState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RETRY_WAIT = "retry_wait"


class NotificationPoller:
    def __init__(
        self,
        source: NotificationSource,
        fetcher: RetryingFetcher | None = None,
        interval: float = NOTIFICATION_POLLING_INTERVAL_MS / 1000,
        monitor: NotificationsMonitor | None = None,
        user_id: str | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.source = source
        self.fetcher = fetcher or RetryingFetcher(sleep=sleep)
        self.base_interval = interval
        self.interval = interval
        self.monitor = monitor
        self.user_id = user_id
        self._sleep = sleep

        self.state = PollerState.IDLE
        self.notifications: list[CommentNotification] = []
        self.unread_count = 0
        self.error: str | None = None
        self.last_checked: datetime | None = None
        self.retry_count = 0
        self._token: CancellationToken | None = None
        self._running = False

    def _on_attempt(self, attempt: int) -> None:
        self.state = PollerState.FETCHING

    def _on_retry(self, retry: int, delay: float) -> None:
        self.state = PollerState.RETRY_WAIT
        self.retry_count = retry
        logger.info("Notification poll retry %d in %.1fs", retry, delay)

    async def poll_once(self) -> bool:
        """Run one poll with retries. Returns True on success."""
        if self._token is not None:
            self._token.cancel()
        token = CancellationToken()
        self._token = token

        started = time.perf_counter()
        result = await self.fetcher.fetch(
            lambda: self.source(self.last_checked),
            token=token,
            on_retry=self._on_retry,
            on_attempt=self._on_attempt,
        )
        elapsed_ms = (time.perf_counter() - started) * 1000

        if result.cancelled:
            return False
        if self._token is token:
            self._token = None
        self.state = PollerState.IDLE

        if result.ok:
            self.notifications = list(result.value or [])
            self.unread_count = sum(1 for item in self.notifications if item.is_new)
            self.error = None
            self.retry_count = 0
            self.interval = self.base_interval
            self.last_checked = utc_now()
            if self.monitor:
                self.monitor.record_request(True, elapsed_ms, user_id=self.user_id)
            return True

        self.error = NOTIFICATION_ERROR_MESSAGE
        self.interval = self.base_interval * 2
        logger.warning("Notification poll failed after %d attempts: %s", result.attempts, result.error)
        if self.monitor:
            self.monitor.record_request(False, elapsed_ms, error=result.error, user_id=self.user_id)
        return False

    async def run(self, max_polls: int | None = None) -> None:
        """Poll until stop() (or ``max_polls`` polls have run)."""
        self._running = True
        polls = 0
        while self._running:
            await self.poll_once()
            polls += 1
            if max_polls is not None and polls >= max_polls:
                break
            if not self._running:
                break
            await self._sleep(self.interval)
        self._running = False

    def start(self) -> asyncio.Task:
        return asyncio.ensure_future(self.run())

    def stop(self) -> None:
        self._running = False
        if self._token is not None:
            self._token.cancel()
            self._token = None
        self.state = PollerState.IDLE

    @property
    def is_running(self) -> bool:
        return self._running

    def mark_all_as_read(self) -> None:
        """Local only; the server keeps its own last-checked time."""
        self.notifications = [item.mark_read() for item in self.notifications]
        self.unread_count = 0

    def clear(self) -> None:
        self.notifications = []
        self.unread_count = 0
        self.error = None

    async def refresh(self) -> bool:
        self.retry_count = 0
        return await self.poll_once()


def http_notification_source(
    base_url: str,
    user_id: str,
    company: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> NotificationSource:
    """Source reading GET /api/notifications from a running API."""

    async def fetch(last_checked: datetime | None) -> list[CommentNotification]:
        params: dict[str, Any] = {"userId": user_id}
        if last_checked is not None:
            params["lastChecked"] = last_checked.isoformat()
        if company:
            params["company"] = company
        async with httpx.AsyncClient(
            base_url=base_url, timeout=NOTIFICATION_TIMEOUT_MS / 1000, transport=transport
        ) as client:
            response = await client.get("/api/notifications", params=params)
        response.raise_for_status()
        body = response.json()
        if not body.get("success"):
            raise RuntimeError(body.get("error") or "Notificações indisponíveis")
        return [CommentNotification.from_dict(item) for item in body.get("data") or []]

    return fetch
