"""
Tracking Service - fetch -> transform -> cache.

Orchestrates between:
- AsanaClient (source of truth)
- transform/metrics (pure reshaping)
- TrackingDataRepository (last good snapshot, used when Asana is down)
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cachetools import TTLCache

from maritime_tracking.asana.client import AsanaAPIError, AsanaClient, get_asana_client
from maritime_tracking.asana.comments import TaskComment, filter_sentinel_comments
from maritime_tracking.config import TRACKING_CACHE_TTL_SECONDS
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.observability.telemetry import counter, log_event
from maritime_tracking.tracking.metrics import get_tracking_by_id, get_trackings_by_company
from maritime_tracking.tracking.models import TrackingRecord, utc_now
from maritime_tracking.tracking.repository import TrackingDataRepository
from maritime_tracking.tracking.transform import build_trackings

logger = get_logger(__name__)

_CACHE_KEY = "operational"


class TrackingNotFoundError(Exception):
    """No record with the requested id."""


@dataclass
class TrackingSnapshot:
    """Records from one fetch plus where they came from."""

    records: list[TrackingRecord]
    workspace: str = ""
    project: str = ""
    total_tasks: int = 0
    source: str = "asana"  # "asana" | "mock" | "stored"
    synced_at: datetime = field(default_factory=utc_now)

    def meta(self) -> dict[str, Any]:
        return {
            "workspace": self.workspace,
            "project": self.project,
            "total_tasks": self.total_tasks,
            "processed_trackings": len(self.records),
            "source": self.source,
            "last_sync": self.synced_at.isoformat(),
        }


class TrackingService:
    """
    Tracking records for the dashboard.

    A successful fetch is cached in memory for TRACKING_CACHE_TTL_SECONDS and
    written to tracking_data. If Asana fails, the stored snapshot is served;
    if there is none, the AsanaAPIError propagates.
    """

    def __init__(
        self,
        client: AsanaClient | None = None,
        cache_ttl: int = TRACKING_CACHE_TTL_SECONDS,
        persist: bool = True,
    ):
        self.client = client or get_asana_client()
        self.persist = persist
        self._cache: TTLCache[str, TrackingSnapshot] = TTLCache(maxsize=1, ttl=cache_ttl)

    async def get_snapshot(self, refresh: bool = False) -> TrackingSnapshot:
        if not refresh and _CACHE_KEY in self._cache:
            counter("tracking.cache_hits")
            return self._cache[_CACHE_KEY]

        try:
            batch = await self.client.fetch_operational_tasks()
        except AsanaAPIError as e:
            counter("tracking.fetch_failures")
            stored = self._load_stored()
            if not stored:
                raise
            logger.warning("Asana unavailable (%s); serving %d stored records", e, len(stored))
            return TrackingSnapshot(records=stored, source="stored", total_tasks=len(stored))

        records = build_trackings(batch.tasks)
        snapshot = TrackingSnapshot(
            records=records,
            workspace=batch.workspace.get("name", ""),
            project=batch.project.get("name", ""),
            total_tasks=len(batch.tasks),
            source=batch.source,
            synced_at=batch.fetched_at,
        )
        self._cache[_CACHE_KEY] = snapshot

        if self.persist and batch.source == "asana":
            self._store(records)

        log_event("tracking.snapshot_built", records=len(records), source=batch.source)
        return snapshot

    def _load_stored(self) -> list[TrackingRecord]:
        if not self.persist:
            return []
        try:
            return TrackingDataRepository.load_snapshot()
        except (FileNotFoundError, sqlite3.Error) as e:
            logger.warning("Stored tracking snapshot unavailable: %s", e)
            return []

    def _store(self, records: list[TrackingRecord]) -> None:
        try:
            TrackingDataRepository.save_snapshot(records)
        except (FileNotFoundError, sqlite3.Error) as e:
            counter("tracking.snapshot_store_failures")
            logger.warning("Failed to store tracking snapshot: %s", e)

    async def list_trackings(self, company: str | None = None, refresh: bool = False) -> list[TrackingRecord]:
        snapshot = await self.get_snapshot(refresh=refresh)
        if company:
            return get_trackings_by_company(snapshot.records, company)
        return list(snapshot.records)

    async def get_tracking(self, tracking_id: str) -> TrackingRecord:
        """
        Raises:
            TrackingNotFoundError: If no record matches the slug or Asana gid
        """
        snapshot = await self.get_snapshot()
        record = get_tracking_by_id(snapshot.records, tracking_id)
        if record is None:
            raise TrackingNotFoundError(f"Tracking not found: {tracking_id}")
        return record

    async def get_task_comments(self, task_gid: str) -> list[TaskComment]:
        stories = await self.client.get_task_stories(task_gid)
        return filter_sentinel_comments(stories)

    def invalidate(self) -> None:
        self._cache.clear()


_service: TrackingService | None = None


def get_tracking_service() -> TrackingService:
    """Get or create the singleton TrackingService (FastAPI dependency)."""
    global _service
    if _service is None:
        _service = TrackingService()
    return _service
