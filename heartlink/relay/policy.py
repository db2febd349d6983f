"""Decide when a heart-rate reading should be relayed.

The policy performs no I/O.  It owns DispatchState and turns each sample or
manual trigger into at most one effect:

    SendRequested — the caller should relay ``value`` now
    NoData        — manual trigger with no reading yet; show a status instead

Auto-send fires for the first sample after start and then for the first
sample at least ``throttle_interval_ms`` after the previous auto-send, whatever
its value; a ``0`` reading is relayed like any other.  A sample that arrives
while the previous auto-send is still in flight is skipped and leaves the
window untouched.  Manual sends bypass the throttle and do not touch
``last_sent_at``.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable

from heartlink.sensors.base import HeartRateSample

logger = logging.getLogger("heartlink.relay.policy")

THROTTLE_INTERVAL_MS = 10_000

#: Sensor value meaning "no reading yet".
NO_READING = 0.0


def monotonic_millis() -> float:
    return time.monotonic() * 1000


class SendTrigger(str, enum.Enum):
    AUTO = "auto"
    MANUAL = "manual"


@dataclass
class DispatchState:
    """Mutable dispatch bookkeeping, written only by the consumer task.

    Attributes:
        last_sent_at:      Clock reading (ms) of the last auto-send, None = never.
        auto_send_enabled: Whether samples may trigger sends on their own.
    """

    last_sent_at: float | None = None
    auto_send_enabled: bool = True


@dataclass(frozen=True)
class SendRequested:
    value: float
    trigger: SendTrigger


@dataclass(frozen=True)
class NoData:
    pass


def has_reading(value: float) -> bool:
    return value > NO_READING


class DispatchPolicy:
    """Throttled auto-send plus unconditional manual send."""

    def __init__(
        self,
        state: DispatchState | None = None,
        throttle_interval_ms: float = THROTTLE_INTERVAL_MS,
        clock: Callable[[], float] = monotonic_millis,
    ) -> None:
        """Initialize the policy.

        Args:
            state:                Initial state (fresh state with auto-send on if None).
            throttle_interval_ms: Minimum gap between auto-sends.
            clock:                Millisecond clock; must be monotonic.
        """
        self.state = state or DispatchState()
        self.throttle_interval_ms = throttle_interval_ms
        self._clock = clock

    def _window_elapsed(self, now: float) -> bool:
        last = self.state.last_sent_at
        return last is None or now - last >= self.throttle_interval_ms

    def on_sample(self, sample: HeartRateSample, in_flight: bool = False) -> SendRequested | None:
        """Return a SendRequested if this sample should be auto-sent.

        ``in_flight`` tells the policy an earlier auto-send has not finished;
        the sample is then skipped without starting a new throttle window.
        """
        if not self.state.auto_send_enabled:
            return None
        now = self._clock()
        if not self._window_elapsed(now):
            return None
        if in_flight:
            logger.info("Skipping auto send: previous one still in flight")
            return None
        self.state.last_sent_at = now
        logger.debug("Auto-send due for %.1f BPM", sample.value)
        return SendRequested(value=sample.value, trigger=SendTrigger.AUTO)

    def on_manual_trigger(self, current_value: float) -> SendRequested | NoData:
        if not has_reading(current_value):
            return NoData()
        return SendRequested(value=current_value, trigger=SendTrigger.MANUAL)

    def set_auto_send(self, enabled: bool) -> None:
        """Toggle auto-send. Takes effect on the next sample; nothing is sent now."""
        if enabled != self.state.auto_send_enabled:
            logger.info("Auto-send %s", "enabled" if enabled else "disabled")
        self.state.auto_send_enabled = enabled
