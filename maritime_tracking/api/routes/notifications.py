"""
Notification endpoints.

GET returns "&" comments posted since the user's last check; POST
mark-read moves that user's last-checked time to now.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from maritime_tracking.api.routes.session import company_scope
from maritime_tracking.asana.comments import parse_timestamp
from maritime_tracking.notifications.feed import NotificationFeed, get_notification_feed
from maritime_tracking.notifications.monitor import NotificationsMonitor
from maritime_tracking.observability.logging import get_logger

router = APIRouter(prefix="/api/notifications", tags=["notifications"])
logger = get_logger(__name__)

_monitor = NotificationsMonitor()


def get_notifications_monitor() -> NotificationsMonitor:
    return _monitor


def _parse_last_checked(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = parse_timestamp(value)
    if parsed is None:
        raise HTTPException(status_code=400, detail="lastChecked inválido")
    return parsed


@router.get("")
async def list_notifications(
    last_checked: str | None = Query(None, alias="lastChecked"),
    user_id: str | None = Query(None, alias="userId"),
    company: str | None = Depends(company_scope),
    feed: NotificationFeed = Depends(get_notification_feed),
    monitor: NotificationsMonitor = Depends(get_notifications_monitor),
) -> JSONResponse:
    """
    Always 200 so pollers degrade quietly; ``success`` tells whether the
    feed could be read.
    """
    since = _parse_last_checked(last_checked)
    started = datetime.now()
    result = await feed.get_notifications(user_id=user_id, last_checked=since, company=company)
    elapsed_ms = (datetime.now() - started).total_seconds() * 1000
    monitor.record_request(result.success, elapsed_ms, error=result.error, user_id=user_id)
    return JSONResponse(status_code=200, content=result.to_dict())


class MarkReadRequest(BaseModel):
    user_id: str | None = None


@router.post("/mark-read")
async def mark_read(
    body: MarkReadRequest,
    feed: NotificationFeed = Depends(get_notification_feed),
) -> dict[str, Any]:
    checked = feed.mark_read(body.user_id)
    return {"success": True, "last_checked": checked.isoformat()}


@router.get("/monitor")
async def monitor_report(
    monitor: NotificationsMonitor = Depends(get_notifications_monitor),
) -> dict[str, Any]:
    return {"success": True, "data": monitor.report()}
