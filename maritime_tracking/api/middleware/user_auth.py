"""
User authentication for the tracking API.

Bearer tokens are resolved in two steps: a local session issued by
/api/auth/login, then the hosted auth provider (Supabase /auth/v1/user).
Either way the user is mapped to its UserProfile.
"""

from __future__ import annotations

import os
import sqlite3
from dataclasses import dataclass

import httpx
from cachetools import TTLCache
from fastapi import HTTPException, Request, status

from maritime_tracking.companies.repository import CompanyRepository
from maritime_tracking.config import (
    SUPABASE_ANON_KEY_ENV,
    SUPABASE_URL_ENV,
    TOKEN_CACHE_MAX_SIZE,
    TOKEN_CACHE_TTL_SECONDS,
    is_placeholder,
)
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.users.models import UserProfile
from maritime_tracking.users.repository import UserProfileRepository, UserSessionRepository
from maritime_tracking.users.tenancy import TenancyViolationError, enforce_company_scope

logger = get_logger(__name__)


@dataclass
class AuthenticatedUser:
    """Identity behind a bearer token."""

    id: str
    email: str
    profile: UserProfile | None = None

    def __str__(self) -> str:
        return f"User({self.id}, {self.email})"


# Verified tokens expire from the cache so revoked ones stop working
_token_cache: TTLCache[str, AuthenticatedUser] = TTLCache(
    maxsize=TOKEN_CACHE_MAX_SIZE, ttl=TOKEN_CACHE_TTL_SECONDS
)


def _lookup_local_session(token: str) -> AuthenticatedUser | None:
    try:
        user_id = UserSessionRepository.get_user_id(token)
        profile = UserProfileRepository.get_by_id(user_id) if user_id else None
    except (FileNotFoundError, sqlite3.Error) as e:
        logger.warning("Session store unavailable: %s", e)
        return None
    if profile is None:
        return None
    return AuthenticatedUser(id=profile.id, email=profile.email, profile=profile)


def _lookup_profile(user_id: str) -> UserProfile | None:
    try:
        return UserProfileRepository.get_by_id(user_id)
    except (FileNotFoundError, sqlite3.Error) as e:
        logger.warning("Profile lookup failed for %s: %s", user_id, e)
        return None


async def verify_provider_token(token: str) -> AuthenticatedUser:
    """
    Verify a token with the hosted auth provider.

    Raises:
        HTTPException: 401 for an invalid token or unconfigured provider,
            503 when the provider cannot be reached
    """
    base_url = os.getenv(SUPABASE_URL_ENV)
    anon_key = os.getenv(SUPABASE_ANON_KEY_ENV)
    if is_placeholder(base_url) or is_placeholder(anon_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(
                f"{base_url.rstrip('/')}/auth/v1/user",
                headers={"apikey": anon_key, "Authorization": f"Bearer {token}"},
                timeout=10.0,
            )
        except httpx.TimeoutException:
            logger.warning("Token validation timed out")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service unavailable",
            ) from None
        except httpx.RequestError as e:
            logger.error("Token validation request failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Authentication service unavailable",
            ) from e

    if response.status_code != 200:
        logger.warning("Invalid token (status %s)", response.status_code)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = response.json()
    user_id = payload["id"]
    return AuthenticatedUser(id=user_id, email=payload.get("email", ""), profile=_lookup_profile(user_id))


async def verify_user_token(token: str) -> AuthenticatedUser:
    if token in _token_cache:
        return _token_cache[token]

    user = _lookup_local_session(token) or await verify_provider_token(token)
    _token_cache[token] = user
    logger.info("Authenticated user: %s (cache size: %d)", user, len(_token_cache))
    return user


def _extract_bearer_token(authorization: str | None) -> str:
    """Extract token from Authorization header."""
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format. Expected: Bearer <token>",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return parts[1]


async def get_current_user(request: Request) -> AuthenticatedUser:
    """
    FastAPI dependency to get the current authenticated user.

    Usage:
        @router.get("/endpoint")
        async def endpoint(user: AuthenticatedUser = Depends(get_current_user)):
            ...
    """
    token = _extract_bearer_token(request.headers.get("Authorization"))
    return await verify_user_token(token)


async def get_optional_user(request: Request) -> AuthenticatedUser | None:
    """
    FastAPI dependency for optional authentication.

    Returns None if no auth header provided, otherwise validates and returns user.
    """
    authorization = request.headers.get("Authorization")
    if not authorization:
        return None

    try:
        token = _extract_bearer_token(authorization)
        return await verify_user_token(token)
    except HTTPException:
        return None


def scoped_company(user: AuthenticatedUser | None, requested: str | None) -> str | None:
    """
    Company the user may read, for use inside route handlers.

    Raises:
        HTTPException: 403 when the user asks for another company's data
    """
    profile = user.profile if user else None
    own_company = None
    if profile is not None:
        company = CompanyRepository.get_by_id(profile.company_id)
        own_company = company.name if company else None
    try:
        return enforce_company_scope(profile, requested, own_company)
    except TenancyViolationError as e:
        logger.warning("Tenancy violation: %s", e)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso negado a esta empresa") from None


def clear_token_cache() -> None:
    """Clear the token cache. Useful for testing."""
    _token_cache.clear()
