"""Heartlink relay: sensor readings → dispatch decision → HTTP send → status.

Modules:
    policy  — throttled auto-send / manual send decisions (no I/O)
    client  — single-attempt HTTP relay client
    status  — user-facing status strings and snapshot
    monitor — consumer task wiring sensor, policy and client together
"""

from heartlink.relay.client import (
    FailureKind,
    RelayClient,
    RelayFailure,
    RelayResult,
    RelaySuccess,
)
from heartlink.relay.monitor import HeartRateMonitor
from heartlink.relay.policy import (
    THROTTLE_INTERVAL_MS,
    DispatchPolicy,
    DispatchState,
    NoData,
    SendRequested,
    SendTrigger,
)
from heartlink.relay.status import StatusSnapshot, StatusTone

__all__ = [
    "THROTTLE_INTERVAL_MS",
    "DispatchPolicy",
    "DispatchState",
    "FailureKind",
    "HeartRateMonitor",
    "NoData",
    "RelayClient",
    "RelayFailure",
    "RelayResult",
    "RelaySuccess",
    "SendRequested",
    "SendTrigger",
    "StatusSnapshot",
    "StatusTone",
]
