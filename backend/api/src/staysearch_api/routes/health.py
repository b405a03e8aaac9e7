"""Health check endpoints."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter

from staysearch.config import get_settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, Any]:
    """Report liveness and whether the data store is configured.

    Does not contact the store, so it stays cheap enough for load
    balancer probes.
    """
    settings = get_settings()
    return {
        "status": "ok" if settings.is_store_configured else "degraded",
        "store_configured": settings.is_store_configured,
        "environment": settings.environment,
        "timestamp": datetime.now(UTC).isoformat(),
    }
