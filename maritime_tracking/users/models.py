"""
User profile models and role permissions.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from maritime_tracking.tracking.models import utc_now


class UserRole(str, Enum):
    """Roles, most privileged first."""

    ADMIN = "admin"
    MANAGER = "manager"
    OPERATOR = "operator"
    VIEWER = "viewer"

    @classmethod
    def parse(cls, value: str | None) -> UserRole | None:
        try:
            return cls(value)
        except ValueError:
            return None


class UserProfile(BaseModel):
    """A dashboard account scoped to one company."""

    model_config = ConfigDict(frozen=False, use_enum_values=False)

    id: str
    company_id: str
    email: str
    full_name: str
    role: UserRole = UserRole.VIEWER
    active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_public_dict(self) -> dict[str, Any]:
        """Serialized profile without credentials."""
        return {
            "id": self.id,
            "company_id": self.company_id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role.value,
            "active": self.active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> UserProfile:
        return cls(
            id=row["id"],
            company_id=row["company_id"],
            email=row["email"],
            full_name=row["full_name"],
            role=UserRole(row["role"]),
            active=bool(row["active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


# Permission helpers take the profile (or None for anonymous requests).


def is_admin(profile: UserProfile | None) -> bool:
    return profile is not None and profile.role is UserRole.ADMIN


def is_manager(profile: UserProfile | None) -> bool:
    return profile is not None and profile.role in (UserRole.ADMIN, UserRole.MANAGER)


def can_edit(profile: UserProfile | None) -> bool:
    return profile is not None and profile.role in (
        UserRole.ADMIN,
        UserRole.MANAGER,
        UserRole.OPERATOR,
    )


# Operators edit but do not delete
is_operator = can_edit
can_delete = is_manager
can_manage_users = is_admin


def can_view(profile: UserProfile | None) -> bool:
    return profile is not None and profile.active
