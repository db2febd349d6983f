"""Pydantic models for the relay wire format and the control API."""

from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, Field

from heartlink.models.base import HeartlinkBase


# ---------- Relay server wire format ----------

class HeartRatePayload(HeartlinkBase):
    """Body of ``POST /api/health/heartrate``. Built once per send."""

    model_config = ConfigDict(frozen=True)

    heart_rate: float = Field(ge=0)
    timestamp: int  # epoch millis
    device_id: str = Field(min_length=1)


class RelayResponse(HeartlinkBase):
    success: bool
    message: str


# ---------- Control API ----------

class StatusRead(HeartlinkBase):
    current_heart_rate: float
    heart_rate_text: str
    is_available: bool
    last_status_message: str
    last_status_tone: Literal["success", "error", "info"]
    auto_send_enabled: bool
    last_sent_at: int | None = None
    running: bool
    permission_granted: bool


class AutoSendUpdate(HeartlinkBase):
    enabled: bool


class PermissionUpdate(HeartlinkBase):
    granted: bool


class ManualSendRead(HeartlinkBase):
    outcome: Literal["sent", "no_data", "skipped"]
    status: StatusRead
