"""
Company (tenant) models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from maritime_tracking.tracking.models import utc_now


class Company(BaseModel):
    """A customer boundary scoping users and visible trackings."""

    model_config = ConfigDict(frozen=False)

    id: str = Field(..., description="Internal company ID (UUID)")
    name: str = Field(..., description="Canonical uppercase name, e.g. 'UNIVAR'")
    display_name: str
    slug: str
    active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_db_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "slug": self.slug,
            "active": 1 if self.active else 0,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> Company:
        return cls(
            id=row["id"],
            name=row["name"],
            display_name=row["display_name"],
            slug=row["slug"],
            active=bool(row["active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class CompanyOption(BaseModel):
    """A company derived from tracking titles, offered in the company selector."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    display_name: str
