"""Admin API key authentication"""

from __future__ import annotations

import os
import secrets

from fastapi import Header, HTTPException, status

from maritime_tracking.observability.logging import get_logger

logger = get_logger(__name__)

ADMIN_API_KEY_ENV = "TRACKING_ADMIN_API_KEY"


class APIKeyAuth:
    """
    API key authentication for admin and diagnostic endpoints.

    The key is read from TRACKING_ADMIN_API_KEY. Without it admin endpoints
    are open, which app startup only tolerates outside production.
    """

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key if api_key is not None else os.getenv(ADMIN_API_KEY_ENV)
        if not self.api_key:
            logger.warning("%s not set - admin endpoints are unprotected!", ADMIN_API_KEY_ENV)

    def verify_api_key(self, authorization: str | None = Header(None)) -> bool:
        """
        Verify API key from Authorization header.

        Expected format: "Bearer {api_key}"
        """
        if not self.api_key:
            return True

        if not authorization:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Missing authorization header",
                headers={"WWW-Authenticate": "Bearer"},
            )

        try:
            scheme, token = authorization.split()
            if scheme.lower() != "bearer":
                raise ValueError("Invalid authentication scheme")
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authorization header format. Expected: Bearer {api_key}",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e

        if not secrets.compare_digest(token, self.api_key):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid API key",
            )

        return True


_auth: APIKeyAuth | None = None


def get_api_key_auth() -> APIKeyAuth:
    global _auth
    if _auth is None:
        _auth = APIKeyAuth()
    return _auth


def reset_api_key_auth() -> None:
    """Re-read TRACKING_ADMIN_API_KEY on next use. Useful for testing."""
    global _auth
    _auth = None


def require_admin_auth(authorization: str | None = Header(None)) -> bool:
    """
    Dependency for endpoints that require admin authentication.

    Usage:
        @router.post("/api/admin/endpoint")
        async def admin_endpoint(authenticated: bool = Depends(require_admin_auth)):
            ...
    """
    return get_api_key_auth().verify_api_key(authorization)
