"""Heart-rate monitor: the single consumer that ties sensor, policy and relay together.

Workflow per event:
1. AvailabilityChanged → update ``is_available``
2. SampleReceived      → update the current reading, ask the policy
3. SendRequested       → spawn an independent send task
4. Send task           → relay the payload, write the resulting status

Sensor events are handled in delivery order on one task.  Sends never block
event consumption and are not cancelled by ``stop()``; they finish on their
own and still report their status.

Usage::

    monitor = HeartRateMonitor(SensorStreamAdapter(service), DispatchPolicy(), relay)
    monitor.start()
    ...
    await monitor.aclose()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Literal

from heartlink.relay.client import RelayClient, RelaySuccess
from heartlink.relay.policy import DispatchPolicy, NoData, SendRequested, SendTrigger
from heartlink.relay.status import (
    EMPTY_STATUS,
    StatusMessage,
    StatusSnapshot,
    invalid_payload_status,
    no_data_status,
    relay_status,
    sensor_unavailable_status,
)
from heartlink.sensors.base import (
    AvailabilityChanged,
    SampleReceived,
    SensorEvent,
    SensorRegistrationError,
)
from heartlink.sensors.stream import SensorStreamAdapter

logger = logging.getLogger("heartlink.relay.monitor")

ManualOutcome = Literal["sent", "no_data", "skipped"]


class HeartRateMonitor:
    """Consume sensor events and relay readings according to DispatchPolicy."""

    def __init__(
        self,
        adapter: SensorStreamAdapter,
        policy: DispatchPolicy,
        relay_client: RelayClient,
        single_flight: bool = True,
    ) -> None:
        """Initialize the monitor.

        Args:
            adapter:       Sensor stream adapter to read from.
            policy:        Dispatch policy; owns auto-send and throttle state.
            relay_client:  Client used for every send.
            single_flight: Skip a send while another of the same trigger kind
                           (auto or manual) is still in flight.
        """
        self._adapter = adapter
        self._policy = policy
        self._relay = relay_client
        self._single_flight = single_flight

        self._current_heart_rate = 0.0
        self._is_available = False
        self._status: StatusMessage = EMPTY_STATUS
        self._last_sent_at: int | None = None

        self._consumer: asyncio.Task | None = None
        self._sends: set[asyncio.Task] = set()
        self._in_flight: set[SendTrigger] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    def start(self) -> None:
        """Start the consumer task. No-op if it is already running."""
        if self.running:
            return
        logger.info("Starting heart rate collection")
        self._consumer = asyncio.create_task(self._consume(), name="heartlink-consumer")

    async def stop(self) -> None:
        """Cancel the consumer task, which unregisters the sensor callback."""
        consumer, self._consumer = self._consumer, None
        if consumer is None:
            return
        consumer.cancel()
        try:
            await consumer
        except asyncio.CancelledError:
            pass
        self._is_available = False
        logger.info("Heart rate collection stopped")

    async def wait_for_sends(self) -> None:
        """Wait until every send started so far has finished."""
        while self._sends:
            await asyncio.gather(*self._sends, return_exceptions=True)

    async def aclose(self) -> None:
        """Stop consuming and wait for outstanding sends to finish."""
        await self.stop()
        await self.wait_for_sends()

    async def _consume(self) -> None:
        has_capability = await self._adapter.check_capability()
        logger.info("Heart rate capability: %s", has_capability)
        if not has_capability:
            self._status = sensor_unavailable_status()
            return

        try:
            async with self._adapter.open_stream() as events:
                async for event in events:
                    self._handle_event(event)
        except SensorRegistrationError as exc:
            logger.error("Heart rate stream failed: %s", exc)
            self._is_available = False
            self._status = sensor_unavailable_status()

    def _handle_event(self, event: SensorEvent) -> None:
        if isinstance(event, AvailabilityChanged):
            logger.debug("Availability changed: %s", event.is_available)
            self._is_available = event.is_available
        elif isinstance(event, SampleReceived):
            self._current_heart_rate = event.sample.value
            request = self._policy.on_sample(
                event.sample, in_flight=self._is_in_flight(SendTrigger.AUTO)
            )
            if request is not None:
                self._dispatch(request)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def _is_in_flight(self, trigger: SendTrigger) -> bool:
        return self._single_flight and trigger in self._in_flight

    def _dispatch(self, request: SendRequested) -> bool:
        if self._is_in_flight(request.trigger):
            logger.info("Skipping %s send: previous one still in flight", request.trigger.value)
            return False
        self._in_flight.add(request.trigger)
        task = asyncio.create_task(self._send(request))
        self._sends.add(task)
        task.add_done_callback(self._sends.discard)
        return True

    async def _send(self, request: SendRequested) -> None:
        try:
            payload = self._relay.build_payload(request.value)
        except ValueError as exc:
            self._in_flight.discard(request.trigger)
            logger.error("Cannot build payload for %.1f BPM: %s", request.value, exc)
            self._status = invalid_payload_status()
            return
        try:
            result = await self._relay.send(payload)
        finally:
            self._in_flight.discard(request.trigger)
        self._status = relay_status(result)
        if isinstance(result, RelaySuccess):
            self._last_sent_at = payload.timestamp

    # ------------------------------------------------------------------
    # User-facing controls
    # ------------------------------------------------------------------

    def trigger_manual_send(self) -> ManualOutcome:
        """Relay the current reading now, ignoring the throttle."""
        decision = self._policy.on_manual_trigger(self._current_heart_rate)
        if isinstance(decision, NoData):
            self._status = no_data_status()
            return "no_data"
        return "sent" if self._dispatch(decision) else "skipped"

    def set_auto_send(self, enabled: bool) -> None:
        self._policy.set_auto_send(enabled)

    def set_status(self, message: StatusMessage) -> None:
        self._status = message

    def status(self) -> StatusSnapshot:
        return StatusSnapshot(
            current_heart_rate=self._current_heart_rate,
            is_available=self._is_available,
            last_status_message=self._status.text,
            last_status_tone=self._status.tone,
            auto_send_enabled=self._policy.state.auto_send_enabled,
            last_sent_at=self._last_sent_at,
            running=self.running,
        )
