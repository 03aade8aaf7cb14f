"""
Session endpoints - local login and active-account checks.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from maritime_tracking.users.service import UserAdminService

router = APIRouter(prefix="/api/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class ValidateActiveRequest(BaseModel):
    user_id: str | None = None


@router.post("/login")
async def login(body: LoginRequest) -> dict[str, Any]:
    profile, token = UserAdminService.login(body.email, body.password)
    return {
        "success": True,
        "access_token": token,
        "token_type": "bearer",
        "user": profile.to_public_dict(),
    }


@router.post("/validate-active")
async def validate_active(body: ValidateActiveRequest) -> JSONResponse:
    """200 for an active account, 403 inactive, 404 deleted; the client logs out on should_logout."""
    status = UserAdminService.validate_active(body.user_id)
    return JSONResponse(status_code=status.status_code, content=status.to_dict())
