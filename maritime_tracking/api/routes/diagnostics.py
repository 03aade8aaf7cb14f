"""Diagnostic endpoints (admin key required).

Report configuration state without ever returning secret values.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends

from maritime_tracking.api.middleware.auth import require_admin_auth
from maritime_tracking.asana.client import get_asana_client
from maritime_tracking.config import ENV, get_env_status
from maritime_tracking.observability.telemetry import get_counters, get_latency_stats

router = APIRouter(prefix="/api", tags=["diagnostics"])


@router.get("/asana/status")
async def asana_status(authenticated: bool = Depends(require_admin_auth)) -> dict[str, Any]:
    client = get_asana_client()
    return {
        "success": True,
        "config": client.get_config_status(),
        "counters": get_counters("asana."),
        "latency": get_latency_stats("asana.fetch_operational_tasks"),
        "timestamp": datetime.now(UTC).isoformat(),
    }


@router.get("/debug/env-check")
async def env_check(authenticated: bool = Depends(require_admin_auth)) -> dict[str, Any]:
    """Presence/placeholder status of each env var the service reads."""
    variables = get_env_status()
    missing = [key for key, state in variables.items() if not state["valid"]]
    return {
        "success": True,
        "environment": ENV,
        "variables": variables,
        "missing": missing,
        "ready": not missing,
    }
