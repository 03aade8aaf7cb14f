"""
Notifications - sentinel comment feed, client-side poller and monitor.
"""

from maritime_tracking.notifications.feed import FeedResult, NotificationFeed, get_notification_feed
from maritime_tracking.notifications.fetcher import (
    CancellationToken,
    FetchCancelled,
    FetchResult,
    RetryingFetcher,
)
from maritime_tracking.notifications.models import CommentNotification
from maritime_tracking.notifications.monitor import NotificationsMonitor
from maritime_tracking.notifications.poller import NotificationPoller, PollerState

__all__ = [
    "CancellationToken",
    "CommentNotification",
    "FeedResult",
    "FetchCancelled",
    "FetchResult",
    "NotificationFeed",
    "NotificationPoller",
    "NotificationsMonitor",
    "PollerState",
    "RetryingFetcher",
    "get_notification_feed",
]
