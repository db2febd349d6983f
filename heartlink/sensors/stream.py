"""Adapt a push-based SensorService into a pull-based async event stream.

Usage::

    adapter = SensorStreamAdapter(service)
    async with adapter.open_stream() as events:
        async for event in events:
            ...

Registration happens on the first pull.  Leaving the ``async with`` block (or
calling ``aclose()``) unregisters the callback exactly once.
"""

from __future__ import annotations

import asyncio
import logging

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

logger = logging.getLogger("heartlink.sensors.stream")


class _QueueCallback(SensorCallback):
    """Forward sensor pushes into an asyncio.Queue owned by one event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
        self._loop = loop
        self._queue = queue

    def _put(self, event: SensorEvent) -> None:
        if self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._queue.put_nowait, event)

    def on_availability_changed(self, data_type: DataType, is_available: bool) -> None:
        logger.debug("Availability changed: %s", is_available)
        self._put(AvailabilityChanged(is_available))

    def on_data_received(self, sample: HeartRateSample) -> None:
        logger.debug("Heart rate received: %s", sample.value)
        self._put(SampleReceived(sample))


class HeartRateStream:
    """Lazy, infinite, non-restartable sequence of SensorEvent values."""

    def __init__(self, service: SensorService, data_type: DataType) -> None:
        self._service = service
        self._data_type = data_type
        self._queue: asyncio.Queue[SensorEvent] = asyncio.Queue()
        self._callback: _QueueCallback | None = None
        self._registered = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _register(self) -> None:
        self._callback = _QueueCallback(asyncio.get_running_loop(), self._queue)
        logger.info("Registering heart rate callback with %s", self._service.DISPLAY_NAME)
        try:
            await self._service.register(self._data_type, self._callback)
        except Exception as exc:
            logger.error("Error registering heart rate callback: %s", exc)
            self._closed = True
            raise SensorRegistrationError(
                f"{self._service.DISPLAY_NAME} registration failed: {exc}"
            ) from exc
        self._registered = True

    def __aiter__(self) -> HeartRateStream:
        return self

    async def __anext__(self) -> SensorEvent:
        if self._closed:
            raise StopAsyncIteration
        if self._callback is None:
            await self._register()
        return await self._queue.get()

    async def aclose(self) -> None:
        """Stop the stream and unregister from the sensor service once."""
        self._closed = True
        if not self._registered:
            return
        self._registered = False
        logger.info("Unregistering heart rate callback from %s", self._service.DISPLAY_NAME)
        try:
            await self._service.unregister(self._data_type, self._callback)
        except Exception as exc:
            logger.warning("Error unregistering heart rate callback: %s", exc)

    async def __aenter__(self) -> HeartRateStream:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class SensorStreamAdapter:
    """Entry point used by the relay layer to reach the heart-rate sensor."""

    def __init__(self, service: SensorService) -> None:
        self._service = service

    @property
    def service(self) -> SensorService:
        return self._service

    async def check_capability(self) -> bool:
        """Report heart-rate support.

        Always True: every supported backend exposes heart rate, so no probe
        is made.  A missing sensor surfaces as a registration failure instead.
        """
        return True

    def open_stream(self) -> HeartRateStream:
        return HeartRateStream(self._service, DataType.HEART_RATE_BPM)
