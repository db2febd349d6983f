"""Control endpoints standing in for the watch screen: status, manual send, toggles."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from heartlink.dependencies import Gate, Monitor
from heartlink.models.relay import AutoSendUpdate, ManualSendRead, PermissionUpdate, StatusRead
from heartlink.permissions import PermissionGate
from heartlink.relay.monitor import HeartRateMonitor

router = APIRouter(prefix="/relay", tags=["relay"])
logger = logging.getLogger("heartlink.routers.relay")


def _status(monitor: HeartRateMonitor, gate: PermissionGate) -> dict[str, Any]:
    snapshot = monitor.status()
    return {
        "current_heart_rate": snapshot.current_heart_rate,
        "heart_rate_text": snapshot.heart_rate_text,
        "is_available": snapshot.is_available,
        "last_status_message": snapshot.last_status_message,
        "last_status_tone": snapshot.last_status_tone.value,
        "auto_send_enabled": snapshot.auto_send_enabled,
        "last_sent_at": snapshot.last_sent_at,
        "running": snapshot.running,
        "permission_granted": gate.granted,
    }


@router.get("/status", response_model=StatusRead)
async def get_status(monitor: Monitor, gate: Gate) -> Any:
    return _status(monitor, gate)


@router.post("/send", response_model=ManualSendRead)
async def send_now(monitor: Monitor, gate: Gate) -> Any:
    outcome = monitor.trigger_manual_send()
    logger.info("Manual send requested: %s", outcome)
    return {"outcome": outcome, "status": _status(monitor, gate)}


@router.put("/auto-send", response_model=StatusRead)
async def update_auto_send(body: AutoSendUpdate, monitor: Monitor, gate: Gate) -> Any:
    monitor.set_auto_send(body.enabled)
    return _status(monitor, gate)


@router.put("/permission", response_model=StatusRead)
async def update_permission(body: PermissionUpdate, monitor: Monitor, gate: Gate) -> Any:
    await gate.set_granted(body.granted)
    return _status(monitor, gate)
