"""
User administration endpoints (admin key required).

Business rules live in UserAdminService; UserAdminError subclasses are
turned into the error envelope by the app-level handler.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from maritime_tracking.api.middleware.auth import require_admin_auth
from maritime_tracking.config import API_LIST_LIMIT_DEFAULT, API_LIST_LIMIT_MAX
from maritime_tracking.users.repository import UserProfileRepository
from maritime_tracking.users.service import UserAdminService

router = APIRouter(prefix="/api/admin", tags=["admin"])


class CreateUserRequest(BaseModel):
    email: str | None = None
    password: str | None = None
    full_name: str | None = None
    company_id: str | None = None
    role: str | None = None


class EditUserRequest(BaseModel):
    user_id: str | None = None
    email: str | None = None
    full_name: str | None = None
    role: str | None = None
    company_id: str | None = None
    active: bool = True


@router.get("/users")
async def list_users(
    authenticated: bool = Depends(require_admin_auth),
    company_id: str | None = Query(None, alias="companyId"),
    limit: int = Query(API_LIST_LIMIT_DEFAULT, ge=1, le=API_LIST_LIMIT_MAX),
) -> dict[str, Any]:
    users = UserProfileRepository.list_all(company_id)[:limit]
    return {
        "success": True,
        "data": [user.to_public_dict() for user in users],
        "count": len(users),
    }


@router.post("/create-user")
async def create_user(
    body: CreateUserRequest,
    authenticated: bool = Depends(require_admin_auth),
) -> dict[str, Any]:
    result = UserAdminService.create_user(
        email=body.email,
        password=body.password,
        full_name=body.full_name,
        company_id=body.company_id,
        role=body.role,
    )
    return {"success": True, **result.to_dict()}


@router.put("/edit-user")
async def edit_user(
    body: EditUserRequest,
    authenticated: bool = Depends(require_admin_auth),
) -> dict[str, Any]:
    result = UserAdminService.edit_user(
        user_id=body.user_id,
        email=body.email,
        full_name=body.full_name,
        role=body.role,
        company_id=body.company_id,
        active=body.active,
    )
    return {"success": True, **result.to_dict()}


@router.delete("/delete-user")
async def delete_user(
    user_id: str | None = Query(None, alias="userId"),
    authenticated: bool = Depends(require_admin_auth),
) -> dict[str, Any]:
    result = UserAdminService.delete_user(user_id)
    return {
        "success": True,
        "message": result.message,
        "deleted_user": result.user.to_public_dict(),
        "actions": result.actions,
    }
