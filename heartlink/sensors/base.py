"""Base classes and event types for heart-rate sensor access.

Every sensor backend must subclass SensorService and push readings through a
SensorCallback.  The stream adapter in ``heartlink.sensors.stream`` turns
those pushes into an async sequence of SensorEvent values, which is the only
shape the relay layer consumes.
"""

from __future__ import annotations

import enum
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Union

logger = logging.getLogger("heartlink.sensors")


class DataType(str, enum.Enum):
    """Sensor data types a service can be registered for."""

    HEART_RATE_BPM = "heart_rate_bpm"


def epoch_millis() -> int:
    """Current wall-clock time in milliseconds since the Unix epoch."""
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Readings and events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HeartRateSample:
    """One heart-rate reading delivered by the sensor.

    A value of ``0.0`` means the sensor has no reading yet; it is shown as
    "measuring" and never relayed.

    Attributes:
        value:       Beats per minute.
        observed_at: Epoch milliseconds when the reading was delivered.
    """

    value: float
    observed_at: int = field(default_factory=epoch_millis)


@dataclass(frozen=True)
class SampleReceived:
    sample: HeartRateSample


@dataclass(frozen=True)
class AvailabilityChanged:
    is_available: bool


SensorEvent = Union[SampleReceived, AvailabilityChanged]


class SensorRegistrationError(RuntimeError):
    """Raised when the sensor service refuses a callback registration."""


# ---------------------------------------------------------------------------
# Platform boundary
# ---------------------------------------------------------------------------


class SensorCallback(ABC):
    """Receiver for pushes from a SensorService.

    Implementations must be safe to call from any thread.
    """

    @abstractmethod
    def on_availability_changed(self, data_type: DataType, is_available: bool) -> None:
        """Called when the sensor starts or stops producing data."""

    @abstractmethod
    def on_data_received(self, sample: HeartRateSample) -> None:
        """Called once per delivered reading."""


class SensorService(ABC):
    """Abstract base class for push-based heart-rate sensor backends.

    Subclasses must implement:
        - register()
        - unregister()
    """

    #: Unique slug used by the sensor registry (e.g. 'simulated', 'ble').
    SOURCE_ID: str = "unknown"

    #: Human-readable name for logging.
    DISPLAY_NAME: str = "Unknown Sensor"

    @abstractmethod
    async def register(self, data_type: DataType, callback: SensorCallback) -> None:
        """Start delivering readings of ``data_type`` to ``callback``.

        Raises:
            Exception: Any backend error; the stream adapter wraps it in
                SensorRegistrationError.
        """

    @abstractmethod
    async def unregister(self, data_type: DataType, callback: SensorCallback) -> None:
        """Stop delivering readings to ``callback`` and release the sensor."""
