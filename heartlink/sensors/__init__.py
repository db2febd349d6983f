"""Heartlink sensor access.

Modules:
    base     — SensorService ABC, callback interface, sample and event types
    stream   — push-callback to async-iterator adapter
    adapters — concrete backends (simulated, BLE)
"""

from heartlink.sensors.base import (
    AvailabilityChanged,
    DataType,
    HeartRateSample,
    SampleReceived,
    SensorCallback,
    SensorEvent,
    SensorRegistrationError,
    SensorService,
)
from heartlink.sensors.stream import HeartRateStream, SensorStreamAdapter

__all__ = [
    "AvailabilityChanged",
    "DataType",
    "HeartRateSample",
    "HeartRateStream",
    "SampleReceived",
    "SensorCallback",
    "SensorEvent",
    "SensorRegistrationError",
    "SensorService",
    "SensorStreamAdapter",
]
