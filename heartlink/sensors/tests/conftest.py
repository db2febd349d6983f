"""Shared fixtures and a scriptable sensor backend for sensor and relay tests."""

from __future__ import annotations

import asyncio

import pytest

from heartlink.sensors.base import DataType, HeartRateSample, SensorCallback, SensorService
from heartlink.sensors.stream import SensorStreamAdapter


async def settle(rounds: int = 20) -> None:
    """Let queued callbacks and freshly created tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeSensorService(SensorService):
    """SensorService double that records calls and lets tests push readings.

    Args:
        fail_with:      Exception raised from register(), if set.
        initial_events: ("sample", bpm) / ("availability", bool) pushed
                        synchronously during register().
    """

    SOURCE_ID = "fake"
    DISPLAY_NAME = "Fake Sensor"

    def __init__(
        self,
        fail_with: Exception | None = None,
        initial_events: list[tuple[str, object]] | None = None,
    ) -> None:
        self.fail_with = fail_with
        self.initial_events = initial_events or []
        self.callback: SensorCallback | None = None
        self.register_calls = 0
        self.unregister_calls = 0

    async def register(self, data_type: DataType, callback: SensorCallback) -> None:
        self.register_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.callback = callback
        for kind, value in self.initial_events:
            if kind == "sample":
                self.push_sample(float(value))
            else:
                self.push_availability(bool(value))

    async def unregister(self, data_type: DataType, callback: SensorCallback) -> None:
        self.unregister_calls += 1
        self.callback = None

    @property
    def registered(self) -> bool:
        return self.callback is not None

    def push_sample(self, bpm: float) -> None:
        assert self.callback is not None, "no callback registered"
        self.callback.on_data_received(HeartRateSample(value=bpm))

    def push_availability(self, is_available: bool) -> None:
        assert self.callback is not None, "no callback registered"
        self.callback.on_availability_changed(DataType.HEART_RATE_BPM, is_available)


@pytest.fixture
def fake_service() -> FakeSensorService:
    return FakeSensorService()


@pytest.fixture
def stream_adapter(fake_service: FakeSensorService) -> SensorStreamAdapter:
    return SensorStreamAdapter(fake_service)
