"""
Company endpoints.

- GET /api/companies - selector options derived from tracking titles
- POST /api/admin/sync-companies - push derived companies into the store
- GET /api/admin/companies - stored active companies
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from maritime_tracking.api.middleware.auth import require_admin_auth
from maritime_tracking.companies import (
    CompanyRepository,
    extract_companies,
    extract_company_names_loose,
    get_company_stats,
)
from maritime_tracking.companies.service import sync_companies
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.tracking.service import TrackingService, get_tracking_service

router = APIRouter(prefix="/api", tags=["companies"])
logger = get_logger(__name__)


@router.get("/companies")
async def list_companies(
    service: TrackingService = Depends(get_tracking_service),
) -> dict[str, Any]:
    snapshot = await service.get_snapshot()
    companies = extract_companies(snapshot.records)
    return {
        "success": True,
        "data": [company.model_dump() for company in companies],
        "count": len(companies),
        "stats": get_company_stats(snapshot.records),
    }


@router.post("/admin/sync-companies")
async def sync_companies_from_asana(
    authenticated: bool = Depends(require_admin_auth),
    service: TrackingService = Depends(get_tracking_service),
) -> dict[str, Any]:
    """Upsert every company found in the operational project (lenient parse)."""
    batch = await service.client.fetch_operational_tasks()
    names = extract_company_names_loose(batch.tasks)
    logger.info("Syncing %d companies from %d tasks", len(names), len(batch.tasks))
    result = sync_companies(names)
    return {"success": True, **result.to_dict()}


@router.get("/admin/companies")
async def list_stored_companies(authenticated: bool = Depends(require_admin_auth)) -> dict[str, Any]:
    """Active companies; the default company is created when none exist."""
    companies = CompanyRepository.list_active()
    if not companies:
        companies = [CompanyRepository.ensure_default()]
    return {
        "success": True,
        "data": [company.model_dump(mode="json") for company in companies],
        "count": len(companies),
    }
