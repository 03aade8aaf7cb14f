"""
Shared fixtures.

Tests never touch the packaged database: ``db`` points TRACKING_DB_PATH at
a fresh file under tmp_path and resets the connection pool around the test.
"""

from __future__ import annotations

import pytest

from maritime_tracking.asana.client import reset_asana_client
from maritime_tracking.infrastructure.database import init_database, reset_pool
from maritime_tracking.observability.telemetry import reset_telemetry


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """No real credentials leak into tests; singletons start fresh."""
    for key in ("ASANA_ACCESS_TOKEN", "SUPABASE_URL", "SUPABASE_ANON_KEY", "TRACKING_ADMIN_API_KEY"):
        monkeypatch.delenv(key, raising=False)
    reset_asana_client()
    reset_telemetry()
    yield
    reset_asana_client()


@pytest.fixture
def db(tmp_path, monkeypatch):
    """Initialized temporary database."""
    monkeypatch.setenv("TRACKING_DB_PATH", str(tmp_path / "tracking.db"))
    reset_pool()
    init_database()
    yield tmp_path / "tracking.db"
    reset_pool()


def make_task(
    gid: str,
    name: str,
    completed: bool = False,
    fields: dict[str, str] | None = None,
    section: str | None = None,
    modified_at: str = "2024-03-01T12:00:00.000Z",
    parent: dict | None = None,
    notes: str = "",
) -> dict:
    """Task dict in the shape returned by GET /tasks."""
    return {
        "gid": gid,
        "name": name,
        "completed": completed,
        "notes": notes,
        "assignee": None,
        "parent": parent,
        "modified_at": modified_at,
        "memberships": [{"section": {"name": section}}] if section else [],
        "custom_fields": [{"name": key, "text_value": value} for key, value in (fields or {}).items()],
    }


@pytest.fixture
def task_factory():
    return make_task
