"""
Company sync - push companies derived from Asana into the companies table.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from maritime_tracking.companies.repository import CompanyRepository
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.observability.telemetry import log_event

logger = get_logger(__name__)


@dataclass
class SyncResult:
    total_processed: int = 0
    created: int = 0
    updated: int = 0
    errors: int = 0
    details: list[dict[str, Any]] = field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Sincronização concluída: {self.created} criadas, "
            f"{self.updated} atualizadas, {self.errors} erros"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "stats": {
                "total_processed": self.total_processed,
                "created": self.created,
                "updated": self.updated,
                "errors": self.errors,
            },
            "message": self.message,
            "details": self.details,
        }


def sync_companies(names: Iterable[str]) -> SyncResult:
    """
    Upsert each name; one failing name is recorded and does not stop the rest.
    """
    result = SyncResult()
    for name in names:
        result.total_processed += 1
        try:
            company, created = CompanyRepository.upsert_by_name(name)
        except sqlite3.IntegrityError as e:
            logger.warning("Company sync failed for %s: %s", name, e)
            result.errors += 1
            result.details.append({"name": name, "action": "error", "error": "conflito de slug ou nome"})
            continue

        if created:
            result.created += 1
        else:
            result.updated += 1
        result.details.append(
            {"name": name, "id": company.id, "action": "created" if created else "updated"}
        )

    log_event(
        "companies.synced",
        total=result.total_processed,
        created=result.created,
        updated=result.updated,
        errors=result.errors,
    )
    return result
