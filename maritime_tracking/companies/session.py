"""
Current-company context.

The selected company travels with each request (cookie or X-Company-Id
header) instead of living in process-global state; the API layer decodes
it into a CompanySession and encodes it back on change.
"""

from __future__ import annotations

import base64
import json
from dataclasses import asdict, dataclass
from typing import Any

from maritime_tracking.companies.models import CompanyOption

SESSION_COOKIE = "company_session"
SESSION_HEADER = "X-Company-Id"


@dataclass
class CompanySession:
    company_id: str | None = None
    company_name: str | None = None
    display_name: str | None = None

    @property
    def is_selected(self) -> bool:
        return bool(self.company_name)

    def select(self, company: CompanyOption) -> None:
        self.company_id = company.id
        self.company_name = company.name
        self.display_name = company.display_name

    def clear(self) -> None:
        self.company_id = None
        self.company_name = None
        self.display_name = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CompanySession:
        data = data or {}
        return cls(
            company_id=data.get("company_id"),
            company_name=data.get("company_name"),
            display_name=data.get("display_name"),
        )

    def encode(self) -> str:
        """Cookie-safe form (unpadded base64url of the JSON)."""
        raw = json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=True)
        return base64.urlsafe_b64encode(raw.encode()).decode("ascii").rstrip("=")

    @classmethod
    def decode(cls, raw: str | None) -> CompanySession:
        """Empty session for a missing or unreadable cookie."""
        if not raw:
            return cls()
        try:
            data = json.loads(base64.urlsafe_b64decode(raw.encode() + b"=" * (-len(raw) % 4)))
        except ValueError:
            return cls()
        return cls.from_dict(data if isinstance(data, dict) else None)


def effective_company(selected: str | None, user_company: str | None) -> str | None:
    """An explicit selection wins over the user's own company."""
    return selected or user_company
