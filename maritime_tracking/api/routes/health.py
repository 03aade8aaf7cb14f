"""Health check endpoints.

- /health - liveness plus configuration readiness (no external calls)
- /health/db - connection pool health
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from maritime_tracking.asana.client import get_asana_client
from maritime_tracking.config import APP_VERSION, ENV, get_env_status
from maritime_tracking.infrastructure.database import get_pool_stats

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Service status and whether Asana and auth are configured (presence only)."""
    env_status = get_env_status()
    asana_ready = env_status["ASANA_ACCESS_TOKEN"]["valid"]
    auth_ready = env_status["SUPABASE_URL"]["valid"] and env_status["SUPABASE_ANON_KEY"]["valid"]

    return {
        "status": "healthy",
        "service": "Maritime Tracking API",
        "version": APP_VERSION,
        "environment": ENV,
        "timestamp": datetime.now(UTC).isoformat(),
        "asana": {
            "ready": asana_ready,
            "using_mock_data": get_asana_client().mock_mode,
        },
        "auth": {"ready": auth_ready},
    }


@router.get("/health/db")
async def database_health() -> dict[str, Any]:
    """Pool health metrics; degraded above 80% usage."""
    stats = get_pool_stats()
    usage_percent = stats["usage_percent"]

    return {
        "status": "degraded" if usage_percent > 80 else "healthy",
        "pool": stats,
        "warning": "Pool usage high" if usage_percent > 80 else None,
    }
