"""Health check endpoint — public, no auth required."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from heartlink.dependencies import AppSettings

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check(request: Request, settings: AppSettings) -> dict:
    """Liveness probe. Returns 200 if the process is up.

    ``collecting`` reports whether the sensor consumer task is alive; it is
    false before startup has built the monitor.
    """
    monitor = getattr(request.app.state, "monitor", None)
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "collecting": monitor is not None and monitor.running,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
