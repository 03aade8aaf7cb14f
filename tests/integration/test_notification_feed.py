"""Integration tests for the server-side notification feed"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import httpx
import pytest

from maritime_tracking.asana.client import AsanaClient
from maritime_tracking.notifications.feed import NotificationFeed
from maritime_tracking.tracking.service import TrackingService

SINCE = datetime(2024, 2, 1, tzinfo=UTC)

STORIES = {
    "1": [
        {"gid": "s1", "text": "& Navio atracou", "created_at": "2024-03-01T10:00:00.000Z", "created_by": {"name": "Ana"}},
        {"gid": "s2", "text": "& Aguardando BL", "created_at": "2024-01-15T10:00:00.000Z", "created_by": {"name": "Ana"}},
        {"gid": "s3", "text": "comentário interno", "created_at": "2024-03-01T11:00:00.000Z", "created_by": {"name": "Rui"}},
    ],
    "2": [
        {"gid": "s4", "text": "&Liberado pela ANVISA", "created_at": "2024-03-02T09:00:00.000Z", "created_by": {"name": "Rui"}},
    ],
}


class AsanaWithStories:
    def __init__(self, tasks):
        self.tasks = tasks
        self.story_requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.endswith("/workspaces"):
            return httpx.Response(200, json={"data": [{"gid": "w1", "name": "Logística"}]})
        if path.endswith("/projects"):
            return httpx.Response(200, json={"data": [{"gid": "p1", "name": "Operacional"}]})
        if path.endswith("/stories"):
            gid = path.split("/")[-2]
            self.story_requests.append(gid)
            if gid == "9":
                return httpx.Response(500)
            return httpx.Response(200, json={"data": STORIES.get(gid, [])})
        if path.endswith("/tasks"):
            return httpx.Response(200, json={"data": self.tasks})
        return httpx.Response(404)


@pytest.fixture
def asana(task_factory):
    return AsanaWithStories(
        [
            task_factory("1", "661º UNIVAR (PO 1)"),
            task_factory("2", "662º WCB"),
            task_factory("3", "663º AGRIVALE", modified_at="2024-01-10T00:00:00.000Z"),
            task_factory("9", "669º DURI"),
        ]
    )


@pytest.fixture
def feed(asana):
    client = AsanaClient(token="1/abc", base_url="https://asana.test/api/1.0", transport=httpx.MockTransport(asana))
    return NotificationFeed(TrackingService(client=client, persist=False))


def test_new_sentinel_comments_newest_first(feed, asana):
    result = asyncio.run(feed.get_notifications(user_id="u1", last_checked=SINCE))

    assert result.success
    assert [(n.id, n.task_id, n.comment_text) for n in result.data] == [
        ("s4", "2", "Liberado pela ANVISA"),
        ("s1", "1", "Navio atracou"),
    ]
    assert result.data[1].task_title == "661º UNIVAR (PO 1)"
    # task 3 was not modified since the last check; task 9 failed and was skipped
    assert "3" not in asana.story_requests
    assert "9" in asana.story_requests


def test_company_scope_and_limit(asana):
    client = AsanaClient(token="1/abc", base_url="https://asana.test/api/1.0", transport=httpx.MockTransport(asana))
    feed = NotificationFeed(TrackingService(client=client, persist=False), max_items=1)

    scoped = asyncio.run(feed.get_notifications(last_checked=SINCE, company="UNIVAR"))
    assert [n.id for n in scoped.data] == ["s1"]

    limited = asyncio.run(feed.get_notifications(last_checked=SINCE))
    assert [n.id for n in limited.data] == ["s4"]
    assert limited.to_dict()["count"] == 1


def test_mark_read_moves_the_window(feed):
    checked = feed.mark_read("u1", at=datetime(2024, 3, 1, 11, 30, tzinfo=UTC))
    assert feed.last_checked_for("u1") == checked

    result = asyncio.run(feed.get_notifications(user_id="u1"))
    assert [n.id for n in result.data] == ["s4"]

    # other users keep their own window
    assert feed.last_checked_for("u2") != checked


def test_without_token_is_unsuccessful_not_an_error():
    feed = NotificationFeed(TrackingService(client=AsanaClient(token=""), persist=False))

    body = asyncio.run(feed.get_notifications()).to_dict()

    assert body["success"] is False
    assert body["error"] == "Token Asana não configurado"
    assert body["data"] == []


def test_read_state_is_bounded(feed):
    bounded = NotificationFeed(feed.service, max_users=2)
    first = bounded.mark_read("u1", at=SINCE)
    bounded.mark_read("u2", at=SINCE)
    bounded.mark_read("u3", at=SINCE)

    assert len(bounded._last_checked) == 2
    assert bounded.last_checked_for("u1") != first
    assert bounded.last_checked_for("u3") == SINCE
