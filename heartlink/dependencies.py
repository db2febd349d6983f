"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from heartlink.config import Settings, get_settings
from heartlink.permissions import PermissionGate
from heartlink.relay.monitor import HeartRateMonitor


def get_app_settings(request: Request) -> Settings:
    """Return the settings the app was created with."""
    return getattr(request.app.state, "settings", None) or get_settings()


def get_monitor(request: Request) -> HeartRateMonitor:
    """Return the monitor built at startup (see ``heartlink.main.lifespan``)."""
    monitor: HeartRateMonitor | None = getattr(request.app.state, "monitor", None)
    if monitor is None:
        raise HTTPException(status_code=503, detail="Heart rate monitor not initialized")
    return monitor


def get_permission_gate(request: Request) -> PermissionGate:
    gate: PermissionGate | None = getattr(request.app.state, "permission_gate", None)
    if gate is None:
        raise HTTPException(status_code=503, detail="Heart rate monitor not initialized")
    return gate


# Annotated shortcuts for route signatures
Monitor = Annotated[HeartRateMonitor, Depends(get_monitor)]
Gate = Annotated[PermissionGate, Depends(get_permission_gate)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
