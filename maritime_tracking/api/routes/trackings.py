"""
Tracking endpoints - operations list with metrics, maritime KPIs and
single-record lookup.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from maritime_tracking.api.routes.session import company_scope
from maritime_tracking.observability.telemetry import counter
from maritime_tracking.tracking.metrics import (
    calculate_kpis,
    calculate_metrics,
    filter_trackings,
    get_filter_options,
)
from maritime_tracking.tracking.service import TrackingNotFoundError, TrackingService, get_tracking_service

router = APIRouter(prefix="/api/trackings", tags=["trackings"])


@router.get("")
async def list_trackings(
    company: str | None = Depends(company_scope),
    reference: str | None = Query(None),
    status: str | None = Query(None),
    exporter: str | None = Query(None),
    product: str | None = Query(None),
    orgao_anuente: str | None = Query(None),
    refresh: bool = Query(False),
    service: TrackingService = Depends(get_tracking_service),
) -> dict[str, Any]:
    """
    Records of the scoped company, filtered, with metrics of the filtered set
    and filter options of the unfiltered one.
    """
    records = await service.list_trackings(company=company, refresh=refresh)
    snapshot = await service.get_snapshot()
    filtered = filter_trackings(
        records,
        reference=reference,
        status=status,
        exporter=exporter,
        product=product,
        orgao_anuente=orgao_anuente,
    )
    counter("api.trackings_listed")
    return {
        "success": True,
        "data": [record.to_dict() for record in filtered],
        "metrics": calculate_metrics(filtered),
        "filter_options": get_filter_options(records),
        "company": company,
        "meta": snapshot.meta(),
    }


@router.get("/kpis")
async def tracking_kpis(
    company: str | None = Depends(company_scope),
    refresh: bool = Query(False),
    service: TrackingService = Depends(get_tracking_service),
) -> dict[str, Any]:
    records = await service.list_trackings(company=company, refresh=refresh)
    return {"success": True, "data": calculate_kpis(records), "company": company}


@router.get("/{tracking_id}")
async def get_tracking(
    tracking_id: str,
    company: str | None = Depends(company_scope),
    service: TrackingService = Depends(get_tracking_service),
) -> dict[str, Any]:
    """Single record by slug or Asana gid; 404 when absent or outside the company scope."""
    record = await service.get_tracking(tracking_id)
    if company and company.lower() not in record.company.lower():
        counter("api.tracking_scope_misses")
        raise TrackingNotFoundError(f"Tracking not found: {tracking_id}")
    return {"success": True, "data": record.to_dict()}
