"""
Tracking snapshot repository - last good fetch, stored in tracking_data.

Used as the fallback when Asana is unreachable so the dashboard shows the
last known records instead of an empty page.
"""

from __future__ import annotations

import json

from maritime_tracking.infrastructure.database import db_transaction, get_db_connection, retry_on_db_lock
from maritime_tracking.observability.logging import get_logger
from maritime_tracking.tracking.models import TrackingRecord, utc_now

logger = get_logger(__name__)


class TrackingDataRepository:
    """Replace-all snapshot storage for tracking records."""

    @staticmethod
    @retry_on_db_lock()
    def save_snapshot(records: list[TrackingRecord]) -> int:
        """
        Replace the stored snapshot with ``records``.

        Returns:
            Number of rows written

        Side Effects:
            - Deletes every row of tracking_data and inserts the new ones
            - Commits transaction
        """
        synced_at = utc_now().isoformat()
        rows = [
            (record.company, record.id, json.dumps(record.to_dict(), ensure_ascii=False), synced_at)
            for record in records
        ]
        with db_transaction() as conn:
            conn.execute("DELETE FROM tracking_data")
            conn.executemany(
                """
                INSERT OR REPLACE INTO tracking_data (company_id, tracking_id, payload, synced_at)
                VALUES (?, ?, ?, ?)
                """,
                rows,
            )
        logger.info("Stored tracking snapshot with %d records", len(rows))
        return len(rows)

    @staticmethod
    def load_snapshot(company: str | None = None) -> list[TrackingRecord]:
        """Stored records, optionally limited to one company (exact match)."""
        with get_db_connection() as conn:
            if company:
                cursor = conn.execute(
                    "SELECT payload FROM tracking_data WHERE company_id = ? ORDER BY id",
                    (company,),
                )
            else:
                cursor = conn.execute("SELECT payload FROM tracking_data ORDER BY id")
            rows = cursor.fetchall()

        return [TrackingRecord.from_dict(json.loads(row["payload"])) for row in rows]

    @staticmethod
    def last_synced_at() -> str | None:
        with get_db_connection() as conn:
            row = conn.execute("SELECT MAX(synced_at) AS synced_at FROM tracking_data").fetchone()
        return row["synced_at"] if row else None
