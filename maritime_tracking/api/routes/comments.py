"""Task comments endpoint - client-visible ("&") comments of one task."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from maritime_tracking.api.routes.session import company_scope
from maritime_tracking.observability.telemetry import counter
from maritime_tracking.tracking.service import TrackingNotFoundError, TrackingService, get_tracking_service

router = APIRouter(prefix="/api/comments", tags=["comments"])


@router.get("")
async def list_comments(
    task_id: str | None = Query(None, alias="taskId"),
    company: str | None = Depends(company_scope),
    service: TrackingService = Depends(get_tracking_service),
) -> dict[str, Any]:
    """Comments of one task; 404 when the task belongs to a company outside the scope."""
    if not task_id or not task_id.strip():
        raise HTTPException(status_code=400, detail="taskId é obrigatório")
    task_gid = task_id.strip()

    if company:
        record = await service.get_tracking(task_gid)
        if company.lower() not in record.company.lower():
            counter("api.comment_scope_misses")
            raise TrackingNotFoundError(f"Tracking not found: {task_gid}")
        task_gid = record.asana_id

    comments = await service.get_task_comments(task_gid)
    return {
        "success": True,
        "data": [comment.to_dict() for comment in comments],
        "count": len(comments),
    }
