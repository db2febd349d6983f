"""User-facing status strings and the read-only status snapshot."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime

from heartlink.relay.client import FailureKind, RelayFailure, RelayResult, RelaySuccess
from heartlink.relay.policy import has_reading

SENSOR_UNAVAILABLE_MESSAGE = "Heart-rate sensor unavailable"
NO_DATA_MESSAGE = "No heart-rate data"
PERMISSION_REQUIRED_MESSAGE = "Body sensor permission required"
INVALID_PAYLOAD_MESSAGE = "Send failed: invalid payload"

WARMING_UP_TEXT = "Sensor warming up..."
MEASURING_TEXT = "Measuring..."


class StatusTone(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class StatusMessage:
    text: str
    tone: StatusTone = StatusTone.INFO


EMPTY_STATUS = StatusMessage("")


def heart_rate_text(value: float, is_available: bool) -> str:
    """Headline text for the current reading.

    ``0`` means no reading yet and is shown as measuring, never as 0 BPM.
    """
    if not is_available:
        return WARMING_UP_TEXT
    if has_reading(value):
        return f"{int(value)} BPM"
    return MEASURING_TEXT


def relay_status(result: RelayResult, now: datetime | None = None) -> StatusMessage:
    if isinstance(result, RelaySuccess):
        stamp = (now or datetime.now()).strftime("%H:%M:%S")
        return StatusMessage(f"✓ Sent ({stamp})", StatusTone.SUCCESS)
    if isinstance(result, RelayFailure) and result.kind is FailureKind.REJECTED:
        return StatusMessage(f"Send failed: {result.reason}", StatusTone.ERROR)
    return StatusMessage(result.reason, StatusTone.ERROR)


def no_data_status() -> StatusMessage:
    return StatusMessage(NO_DATA_MESSAGE, StatusTone.INFO)


def sensor_unavailable_status() -> StatusMessage:
    return StatusMessage(SENSOR_UNAVAILABLE_MESSAGE, StatusTone.ERROR)


def permission_required_status() -> StatusMessage:
    return StatusMessage(PERMISSION_REQUIRED_MESSAGE, StatusTone.INFO)


def invalid_payload_status() -> StatusMessage:
    return StatusMessage(INVALID_PAYLOAD_MESSAGE, StatusTone.ERROR)


@dataclass(frozen=True)
class StatusSnapshot:
    """Point-in-time view of the monitor for the UI layer.

    Attributes:
        current_heart_rate:  Latest reading (0.0 = none yet).
        is_available:        Whether the sensor is currently producing data.
        last_status_message: Result of the latest send or trigger.
        last_status_tone:    success / error / info, for colouring.
        auto_send_enabled:   Auto-send toggle.
        last_sent_at:        Epoch millis of the latest completed send.
        running:             Whether the consumer task is alive.
    """

    current_heart_rate: float
    is_available: bool
    last_status_message: str
    last_status_tone: StatusTone
    auto_send_enabled: bool
    last_sent_at: int | None
    running: bool

    @property
    def heart_rate_text(self) -> str:
        return heart_rate_text(self.current_heart_rate, self.is_available)
