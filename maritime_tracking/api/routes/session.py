"""
Current-company context.

The selection lives in a cookie (JSON CompanySession); clients that cannot
keep cookies send the company name in X-Company-Id instead.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from pydantic import BaseModel

from maritime_tracking.api.middleware.user_auth import AuthenticatedUser, get_optional_user, scoped_company
from maritime_tracking.companies import CompanySession, extract_companies
from maritime_tracking.companies.session import SESSION_COOKIE, SESSION_HEADER, effective_company
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.tracking.service import TrackingService, get_tracking_service

router = APIRouter(prefix="/api/session", tags=["session"])
logger = get_logger(__name__)


def read_company_session(request: Request) -> CompanySession:
    header = request.headers.get(SESSION_HEADER)
    if header and header.strip():
        name = header.strip().upper()
        return CompanySession(company_name=name, display_name=name)
    return CompanySession.decode(request.cookies.get(SESSION_COOKIE))


def selected_company(request: Request) -> str | None:
    """Company chosen in the selector, if any (FastAPI dependency)."""
    return read_company_session(request).company_name


async def company_scope(
    company: str | None = Query(None, description="Company name (contains match)"),
    selected: str | None = Depends(selected_company),
    user: AuthenticatedUser | None = Depends(get_optional_user),
) -> str | None:
    """Company a request may read: query, else the selection, pinned by tenancy (FastAPI dependency)."""
    return scoped_company(user, effective_company(company, selected))


class SelectCompanyRequest(BaseModel):
    company: str


@router.get("/company")
async def get_company(request: Request) -> dict[str, Any]:
    session = read_company_session(request)
    return {"success": True, "selected": session.is_selected, "session": session.to_dict()}


@router.post("/company")
async def select_company(
    body: SelectCompanyRequest,
    response: Response,
    user: AuthenticatedUser | None = Depends(get_optional_user),
    service: TrackingService = Depends(get_tracking_service),
) -> dict[str, Any]:
    """Select a company by id or name among those present in the trackings."""
    requested = body.company.strip()
    snapshot = await service.get_snapshot()
    options = extract_companies(snapshot.records)
    match = next(
        (option for option in options if requested in (option.id, option.name) or requested.upper() == option.name),
        None,
    )
    if match is None:
        raise HTTPException(status_code=404, detail="Empresa não encontrada")

    scoped_company(user, match.name)

    session = CompanySession()
    session.select(match)
    response.set_cookie(SESSION_COOKIE, session.encode(), httponly=True, samesite="lax")
    logger.info("Company selected: %s", match.name)
    return {"success": True, "selected": True, "session": session.to_dict()}


@router.delete("/company")
async def clear_company(response: Response) -> dict[str, Any]:
    session = CompanySession()
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True, "selected": False, "session": session.to_dict()}
