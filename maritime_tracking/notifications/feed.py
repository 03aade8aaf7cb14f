"""
Server-side notification feed.

For every tracking task modified since the user's last check, the feed reads
the task's stories and keeps sentinel comments created after that time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from cachetools import TTLCache

from maritime_tracking.asana.client import AsanaAPIError
from maritime_tracking.asana.comments import filter_sentinel_comments, parse_timestamp
from maritime_tracking.config import (
    NOTIFICATION_LOOKBACK_HOURS,
    NOTIFICATION_MAX_ITEMS,
    NOTIFICATION_READ_STATE_MAX_USERS,
)
from maritime_tracking.notifications.models import CommentNotification
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.observability.telemetry import counter, log_event, time_block
from maritime_tracking.tracking.models import utc_now
from maritime_tracking.tracking.service import TrackingService, get_tracking_service

logger = get_logger(__name__)

ANONYMOUS_USER = "anonymous"


@dataclass
class FeedResult:
    success: bool
    data: list[CommentNotification] = field(default_factory=list)
    last_checked: datetime | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "success": self.success,
            "data": [item.to_dict() for item in self.data],
            "count": len(self.data),
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
        }
        if self.error:
            body["error"] = self.error
        return body


class NotificationFeed:
    def __init__(
        self,
        service: TrackingService | None = None,
        max_items: int = NOTIFICATION_MAX_ITEMS,
        lookback_hours: int = NOTIFICATION_LOOKBACK_HOURS,
        max_users: int = NOTIFICATION_READ_STATE_MAX_USERS,
    ):
        self.service = service or get_tracking_service()
        self.max_items = max_items
        self.lookback = timedelta(hours=lookback_hours)
        # Per-user acknowledgements expire with the lookback window
        self._last_checked: TTLCache[str, datetime] = TTLCache(
            maxsize=max_users, ttl=self.lookback.total_seconds()
        )

    def last_checked_for(self, user_id: str | None, explicit: datetime | None = None) -> datetime:
        """Explicit time, else the user's last acknowledgement, else the lookback window."""
        if explicit is not None:
            return explicit
        stored = self._last_checked.get(user_id or ANONYMOUS_USER)
        return stored or utc_now() - self.lookback

    def mark_read(self, user_id: str | None, at: datetime | None = None) -> datetime:
        checked = at or utc_now()
        self._last_checked[user_id or ANONYMOUS_USER] = checked
        log_event("notifications.mark_read", user_id=user_id or ANONYMOUS_USER)
        return checked

    async def get_notifications(
        self,
        user_id: str | None = None,
        last_checked: datetime | None = None,
        company: str | None = None,
    ) -> FeedResult:
        """
        New sentinel comments, newest first, at most ``max_items``.

        Without an Asana token the result is unsuccessful and empty rather
        than an error, so pollers keep running quietly.
        """
        since = self.last_checked_for(user_id, last_checked)

        if self.service.client.mock_mode:
            return FeedResult(success=False, last_checked=since, error="Token Asana não configurado")

        with time_block("notifications.feed"):
            try:
                records = await self.service.list_trackings(company=company)
            except AsanaAPIError as e:
                counter("notifications.feed_failures")
                logger.warning("Notification feed unavailable: %s", e)
                return FeedResult(success=False, last_checked=since, error=str(e))

            items: list[CommentNotification] = []
            for record in records:
                modified = parse_timestamp(record.last_update)
                if modified is not None and modified <= since:
                    continue
                try:
                    stories = await self.service.client.get_task_stories(record.asana_id)
                except AsanaAPIError as e:
                    counter("notifications.story_failures")
                    logger.warning("Failed to read stories for task %s: %s", record.asana_id, e)
                    continue
                for comment in filter_sentinel_comments(stories):
                    if comment.created <= since:
                        continue
                    items.append(
                        CommentNotification(
                            id=comment.id,
                            task_id=record.asana_id,
                            task_title=record.title,
                            comment_text=comment.text,
                            author=comment.author,
                            created_at=comment.created_at,
                        )
                    )

        items.sort(key=lambda item: parse_timestamp(item.created_at) or since, reverse=True)
        return FeedResult(success=True, data=items[: self.max_items], last_checked=since)


_feed: NotificationFeed | None = None


def get_notification_feed() -> NotificationFeed:
    global _feed
    if _feed is None:
        _feed = NotificationFeed()
    return _feed
