"""In-process heart-rate simulator.

Behaves like a wrist sensor coming up: availability is False during a short
warm-up, then a few ``0`` readings are delivered while the sensor is
"measuring", then plausible values.  Every ``spike_every`` readings a burst of
elevated heart rate is produced.

Useful for development without hardware and as a deterministic backend in
tests (pass a seeded ``random.Random``).
"""

from __future__ import annotations

import asyncio
import logging
import random

from heartlink.sensors.base import DataType, HeartRateSample, SensorCallback, SensorService

logger = logging.getLogger("heartlink.sensors.simulated")

_BASELINE_BPM = 74.0
_BASELINE_JITTER = 4.0
_SPIKE_MIN = 18.0
_SPIKE_MAX = 32.0


class SimulatedHeartRateService(SensorService):
    """Synthetic heart-rate sensor driven by an asyncio task."""

    SOURCE_ID = "simulated"
    DISPLAY_NAME = "Simulated Sensor"

    def __init__(
        self,
        sample_interval_seconds: float = 1.0,
        warmup_samples: int = 2,
        spike_every: int = 30,
        rng: random.Random | None = None,
    ) -> None:
        self._interval = sample_interval_seconds
        self._warmup_samples = warmup_samples
        self._spike_every = spike_every
        self._rng = rng or random.Random()
        self._tasks: dict[int, asyncio.Task] = {}

    def next_value(self, index: int) -> float:
        """Return the reading for the ``index``-th sample (0-based)."""
        if index < self._warmup_samples:
            return 0.0
        bpm = _BASELINE_BPM + self._rng.uniform(-_BASELINE_JITTER, _BASELINE_JITTER)
        if self._spike_every and (index // self._spike_every) % 3 == 2:
            bpm += self._rng.uniform(_SPIKE_MIN, _SPIKE_MAX)
        return round(bpm, 1)

    async def register(self, data_type: DataType, callback: SensorCallback) -> None:
        if data_type is not DataType.HEART_RATE_BPM:
            raise ValueError(f"{self.DISPLAY_NAME} does not support {data_type.value}")
        key = id(callback)
        if key in self._tasks:
            raise RuntimeError("Callback is already registered")
        self._tasks[key] = asyncio.create_task(self._run(data_type, callback))
        logger.info("Simulated sensor started (interval=%.2fs)", self._interval)

    async def unregister(self, data_type: DataType, callback: SensorCallback) -> None:
        task = self._tasks.pop(id(callback), None)
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Simulated sensor stopped")

    async def _run(self, data_type: DataType, callback: SensorCallback) -> None:
        callback.on_availability_changed(data_type, False)
        index = 0
        while True:
            await asyncio.sleep(self._interval)
            if index == 0:
                callback.on_availability_changed(data_type, True)
            callback.on_data_received(HeartRateSample(value=self.next_value(index)))
            index += 1
