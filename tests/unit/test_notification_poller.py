"""Tests for the notification poller state machine and monitor"""

from __future__ import annotations

import asyncio

from maritime_tracking.config import NOTIFICATION_ERROR_MESSAGE
from maritime_tracking.notifications import (
    CommentNotification,
    NotificationPoller,
    NotificationsMonitor,
    PollerState,
    RetryingFetcher,
)


async def _no_sleep(delay: float) -> None:
    return None


def _item(gid: str, is_new: bool = True) -> CommentNotification:
    return CommentNotification(
        id=gid,
        task_id="t1",
        task_title="661º UNIVAR",
        comment_text="Navio atracou",
        author="Ana",
        created_at="2024-01-10T10:00:00.000Z",
        is_new=is_new,
    )


def _poller(source, monitor=None) -> NotificationPoller:
    return NotificationPoller(
        source,
        fetcher=RetryingFetcher(sleep=_no_sleep),
        interval=30,
        monitor=monitor,
        sleep=_no_sleep,
    )


def test_successful_poll_stores_items_and_unread_count():
    seen = []

    async def source(last_checked):
        seen.append(last_checked)
        return [_item("1"), _item("2", is_new=False)]

    monitor = NotificationsMonitor()
    poller = _poller(source, monitor)

    assert asyncio.run(poller.poll_once())
    assert asyncio.run(poller.poll_once())

    assert poller.state is PollerState.IDLE
    assert [n.id for n in poller.notifications] == ["1", "2"]
    assert poller.unread_count == 1
    assert poller.error is None
    assert seen[0] is None
    assert seen[1] is not None
    assert monitor.successful_requests == 2


def test_exhausted_retries_set_error_and_double_interval():
    async def source(last_checked):
        raise RuntimeError("HTTP 500")

    monitor = NotificationsMonitor()
    poller = _poller(source, monitor)

    assert not asyncio.run(poller.poll_once())
    assert poller.error == NOTIFICATION_ERROR_MESSAGE
    assert poller.interval == 60
    assert poller.retry_count == 3
    assert monitor.failed_requests == 1
    assert monitor.last_error == "HTTP 500"


def test_success_after_failure_resets_interval():
    calls = {"n": 0}

    async def source(last_checked):
        calls["n"] += 1
        if calls["n"] <= 4:
            raise RuntimeError("down")
        return [_item("1")]

    poller = _poller(source)
    asyncio.run(poller.poll_once())
    assert poller.interval == 60

    assert asyncio.run(poller.refresh())
    assert poller.interval == 30
    assert poller.retry_count == 0
    assert poller.error is None


def test_new_poll_cancels_in_flight_poll():
    async def scenario():
        gate = asyncio.Event()
        calls = []

        async def source(last_checked):
            calls.append(last_checked)
            if len(calls) == 1:
                await gate.wait()
            return [_item("fresh")]

        poller = _poller(source)
        first = asyncio.ensure_future(poller.poll_once())
        await asyncio.sleep(0.01)
        second = await poller.poll_once()
        return await first, second, poller

    first, second, poller = asyncio.run(scenario())
    assert first is False
    assert second is True
    assert [n.id for n in poller.notifications] == ["fresh"]


def test_run_sleeps_interval_between_polls():
    slept: list[float] = []

    async def sleep(delay: float) -> None:
        slept.append(delay)

    async def source(last_checked):
        return []

    poller = NotificationPoller(source, fetcher=RetryingFetcher(sleep=sleep), interval=30, sleep=sleep)
    asyncio.run(poller.run(max_polls=3))

    assert slept == [30, 30]
    assert not poller.is_running


def test_mark_all_as_read_and_clear():
    async def source(last_checked):
        return [_item("1"), _item("2")]

    poller = _poller(source)
    asyncio.run(poller.poll_once())

    poller.mark_all_as_read()
    assert poller.unread_count == 0
    assert not any(n.is_new for n in poller.notifications)

    poller.clear()
    assert poller.notifications == []


def test_stop_ends_run_loop():
    async def scenario():
        poller = None

        async def source(last_checked):
            poller.stop()
            return []

        poller = _poller(source)
        await poller.run()
        return poller

    poller = asyncio.run(scenario())
    assert not poller.is_running
    assert poller.state is PollerState.IDLE


def test_monitor_health_thresholds():
    monitor = NotificationsMonitor()
    assert monitor.health_status() == "healthy"

    for _ in range(8):
        monitor.record_request(True, 100)
    for _ in range(2):
        monitor.record_request(False, 300, error="Token Asana inválido", user_id="u1")

    assert monitor.success_rate == 0.8
    assert monitor.health_status() == "degraded"
    assert monitor.average_response_time == 140

    report = monitor.report()
    assert report["success_rate"] == 80.0
    assert "Problema com token do Asana - verificar configuração" in report["diagnosis"]

    for _ in range(5):
        monitor.record_request(False, 100, error="HTTP 500")
    assert monitor.health_status() == "unhealthy"


def test_monitor_windows_are_capped():
    monitor = NotificationsMonitor()
    for i in range(120):
        monitor.record_request(False, float(i), error=f"erro {i}")

    assert len(monitor.error_history) == 50
    assert monitor.error_history[0].error == "erro 70"
    assert monitor.average_response_time == sum(range(20, 120)) / 100

    monitor.reset()
    assert monitor.total_requests == 0
    assert monitor.error_history == []
