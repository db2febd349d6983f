"""Tests for the dispatch policy — throttled auto-send and manual send decisions."""

from __future__ import annotations

import pytest

from heartlink.relay.policy import (
    THROTTLE_INTERVAL_MS,
    DispatchPolicy,
    DispatchState,
    NoData,
    SendRequested,
    SendTrigger,
)
from heartlink.relay.tests.conftest import FakeClock
from heartlink.sensors.base import HeartRateSample


@pytest.fixture
def policy(clock: FakeClock) -> DispatchPolicy:
    return DispatchPolicy(clock=clock)


def _feed(policy: DispatchPolicy, clock: FakeClock, gaps_ms: list[float], bpm: float = 72.0):
    """Advance the clock by each gap, deliver a sample, collect decisions."""
    decisions = []
    for gap in gaps_ms:
        clock.advance(gap)
        decisions.append(policy.on_sample(HeartRateSample(value=bpm)))
    return decisions


class TestDefaults:
    def test_default_throttle_is_ten_seconds(self) -> None:
        assert THROTTLE_INTERVAL_MS == 10_000
        assert DispatchPolicy().throttle_interval_ms == 10_000

    def test_auto_send_on_and_never_sent(self) -> None:
        state = DispatchPolicy().state
        assert state.auto_send_enabled is True
        assert state.last_sent_at is None


class TestAutoSend:
    def test_first_sample_always_qualifies(self, policy: DispatchPolicy) -> None:
        decision = policy.on_sample(HeartRateSample(value=65.0))
        assert decision == SendRequested(value=65.0, trigger=SendTrigger.AUTO)

    def test_records_last_sent_at(self, policy: DispatchPolicy, clock: FakeClock) -> None:
        policy.on_sample(HeartRateSample(value=65.0))
        assert policy.state.last_sent_at == clock.now

    def test_disabled_never_sends(self, clock: FakeClock) -> None:
        policy = DispatchPolicy(DispatchState(auto_send_enabled=False), clock=clock)
        decisions = _feed(policy, clock, [0, 1, 10_000, 20_000, 50_000, 500])
        assert decisions == [None] * 6
        assert policy.state.last_sent_at is None

    @pytest.mark.parametrize("gap", [10_000, 10_001, 15_000, 60_000])
    def test_spaced_samples_each_send(
        self, policy: DispatchPolicy, clock: FakeClock, gap: int
    ) -> None:
        decisions = _feed(policy, clock, [0] + [gap] * 5)
        assert all(isinstance(d, SendRequested) for d in decisions)
        assert len(decisions) == 6

    def test_fast_samples_throttled(self, policy: DispatchPolicy, clock: FakeClock) -> None:
        """Samples every 3 s: only the first after each 10 s window sends."""
        decisions = _feed(policy, clock, [0] + [3_000] * 9)
        sent_at = [i * 3_000 for i, d in enumerate(decisions) if d is not None]
        assert sent_at == [0, 12_000, 24_000]

    def test_sample_just_inside_window_dropped(
        self, policy: DispatchPolicy, clock: FakeClock
    ) -> None:
        decisions = _feed(policy, clock, [0, 9_999])
        assert decisions[1] is None

    def test_spaced_zero_readings_are_sent(
        self, policy: DispatchPolicy, clock: FakeClock
    ) -> None:
        decisions = [policy.on_sample(HeartRateSample(value=0.0))]
        clock.advance(10_000)
        decisions.append(policy.on_sample(HeartRateSample(value=0.0)))
        clock.advance(10_000)
        decisions.append(policy.on_sample(HeartRateSample(value=72.0)))

        assert [d.value for d in decisions] == [0.0, 0.0, 72.0]
        assert all(d.trigger is SendTrigger.AUTO for d in decisions)

    def test_zero_reading_starts_window(self, policy: DispatchPolicy, clock: FakeClock) -> None:
        policy.on_sample(HeartRateSample(value=0.0))
        clock.advance(1)
        assert policy.on_sample(HeartRateSample(value=70.0)) is None


class TestInFlight:
    def test_skipped_sample_keeps_window_open(
        self, policy: DispatchPolicy, clock: FakeClock
    ) -> None:
        first = policy.on_sample(HeartRateSample(value=70.0))
        clock.advance(10_000)
        assert policy.on_sample(HeartRateSample(value=71.0), in_flight=True) is None
        assert policy.state.last_sent_at == clock.now - 10_000

        clock.advance(1_000)
        decision = policy.on_sample(HeartRateSample(value=72.0))
        assert first is not None
        assert decision == SendRequested(value=72.0, trigger=SendTrigger.AUTO)
        assert policy.state.last_sent_at == clock.now

    def test_in_flight_inside_window_is_plain_throttle(
        self, policy: DispatchPolicy, clock: FakeClock
    ) -> None:
        policy.on_sample(HeartRateSample(value=70.0))
        clock.advance(500)
        assert policy.on_sample(HeartRateSample(value=71.0), in_flight=True) is None

    def test_custom_interval(self, clock: FakeClock) -> None:
        policy = DispatchPolicy(throttle_interval_ms=1_000, clock=clock)
        decisions = _feed(policy, clock, [0, 500, 500, 500])
        assert [d is not None for d in decisions] == [True, False, True, False]


class TestAutoSendToggle:
    def test_disable_takes_effect_on_next_sample(
        self, policy: DispatchPolicy, clock: FakeClock
    ) -> None:
        policy.on_sample(HeartRateSample(value=70.0))
        policy.set_auto_send(False)
        clock.advance(30_000)
        assert policy.on_sample(HeartRateSample(value=70.0)) is None

    def test_enable_sends_nothing_by_itself(self, clock: FakeClock) -> None:
        policy = DispatchPolicy(DispatchState(auto_send_enabled=False), clock=clock)
        assert policy.set_auto_send(True) is None
        assert policy.state.auto_send_enabled is True
        assert policy.state.last_sent_at is None
        assert policy.on_sample(HeartRateSample(value=70.0)) is not None


class TestManualTrigger:
    def test_zero_value_is_no_data(self, policy: DispatchPolicy) -> None:
        assert policy.on_manual_trigger(0.0) == NoData()

    def test_value_sends(self, policy: DispatchPolicy) -> None:
        decision = policy.on_manual_trigger(72.0)
        assert decision == SendRequested(value=72.0, trigger=SendTrigger.MANUAL)

    def test_bypasses_throttle(self, policy: DispatchPolicy) -> None:
        policy.on_sample(HeartRateSample(value=72.0))
        assert isinstance(policy.on_manual_trigger(72.0), SendRequested)
        assert isinstance(policy.on_manual_trigger(72.0), SendRequested)

    def test_works_with_auto_send_disabled(self, clock: FakeClock) -> None:
        policy = DispatchPolicy(DispatchState(auto_send_enabled=False), clock=clock)
        assert isinstance(policy.on_manual_trigger(80.0), SendRequested)

    def test_does_not_touch_throttle_state(
        self, policy: DispatchPolicy, clock: FakeClock
    ) -> None:
        policy.on_manual_trigger(72.0)
        assert policy.state.last_sent_at is None
        assert policy.on_sample(HeartRateSample(value=72.0)) is not None
