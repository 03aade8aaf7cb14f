"""
Company scoping for tracking reads.

Admins read any company; every other role is pinned to its own company.
"""

from __future__ import annotations

from maritime_tracking.users.models import UserProfile, is_admin


class TenancyViolationError(Exception):
    """Raised when a user asks for data of a company other than their own."""


def enforce_company_scope(
    profile: UserProfile | None,
    requested: str | None,
    own_company: str | None,
) -> str | None:
    """
    Company name the request may read.

    Args:
        profile: Authenticated profile, or None for anonymous requests
        requested: Company asked for (selector, query param), may be empty
        own_company: Name of the profile's company

    Returns:
        ``requested`` for anonymous callers and admins, otherwise ``own_company``

    Raises:
        TenancyViolationError: Non-admin without a company, or asking for another one
    """
    if profile is None or is_admin(profile):
        return requested or None

    if not own_company:
        raise TenancyViolationError(f"User {profile.id} is not linked to a company")

    if requested and requested.strip().upper() != own_company.strip().upper():
        raise TenancyViolationError(
            f"User {profile.id} may not read company {requested!r}"
        )
    return own_company
