"""Bluetooth LE heart-rate sensor backend.

Talks to any strap or watch exposing the standard GATT Heart Rate Service
(watches usually call this "broadcast heart rate").

Environment variables:
    BLE_DEVICE_ADDRESS — MAC address (or platform UUID on macOS) of the device

GATT:
    0x180D — Heart Rate Service
    0x2A37 — Heart Rate Measurement characteristic (notify)

Measurement layout: flags byte, then HR as UINT8 or UINT16 LE (flags bit 0),
optional energy expended UINT16 (bit 3), optional RR intervals as UINT16 LE
in 1/1024 s units (bit 4).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from bleak import BleakClient

from heartlink.sensors.base import DataType, HeartRateSample, SensorCallback, SensorService

logger = logging.getLogger("heartlink.sensors.ble")

HR_SERVICE_UUID = "0000180d-0000-1000-8000-00805f9b34fb"
HR_MEASUREMENT_UUID = "00002a37-0000-1000-8000-00805f9b34fb"

_FLAG_HR_UINT16 = 0x01
_FLAG_ENERGY_EXPENDED = 0x08
_FLAG_RR_PRESENT = 0x10


@dataclass(frozen=True)
class HeartRateMeasurement:
    """Decoded 0x2A37 payload.

    Attributes:
        bpm:   Heart rate in beats per minute.
        rr_ms: RR intervals in milliseconds (may be empty).
    """

    bpm: int
    rr_ms: list[float] = field(default_factory=list)


def parse_heart_rate_measurement(data: bytes | bytearray) -> HeartRateMeasurement:
    """Decode a Heart Rate Measurement characteristic value.

    Raises:
        ValueError: If the payload is too short for the fields its flags announce.
    """
    if len(data) < 2:
        raise ValueError("HRM payload too short")

    flags = data[0]
    offset = 1

    if flags & _FLAG_HR_UINT16:
        if len(data) < offset + 2:
            raise ValueError("HRM payload too short for HR")
        bpm = int.from_bytes(data[offset : offset + 2], "little")
        offset += 2
    else:
        bpm = data[offset]
        offset += 1

    if flags & _FLAG_ENERGY_EXPENDED:
        if len(data) < offset + 2:
            raise ValueError("HRM payload too short for energy expended")
        offset += 2

    rr_ms: list[float] = []
    if flags & _FLAG_RR_PRESENT:
        while len(data) >= offset + 2:
            raw = int.from_bytes(data[offset : offset + 2], "little")
            rr_ms.append(raw * 1000.0 / 1024.0)
            offset += 2

    return HeartRateMeasurement(bpm=bpm, rr_ms=rr_ms)


class BleHeartRateService(SensorService):
    """GATT Heart Rate Service over bleak.

    One callback at a time: registering connects to the device and enables
    notifications, unregistering disables them and disconnects.
    """

    SOURCE_ID = "ble"
    DISPLAY_NAME = "BLE Heart Rate Monitor"

    def __init__(
        self,
        address: str,
        client_factory: Callable[..., Any] = BleakClient,
    ) -> None:
        """Initialize the BLE backend.

        Args:
            address:        Device address passed to BleakClient.
            client_factory: BleakClient-compatible constructor (for testing).
        """
        if not address:
            raise ValueError("BLE sensor requires a device address (BLE_DEVICE_ADDRESS)")
        self._address = address
        self._client_factory = client_factory
        self._client: Any = None
        self._callback: SensorCallback | None = None

    async def register(self, data_type: DataType, callback: SensorCallback) -> None:
        if data_type is not DataType.HEART_RATE_BPM:
            raise ValueError(f"{self.DISPLAY_NAME} does not support {data_type.value}")
        if self._callback is not None:
            raise RuntimeError("A callback is already registered")

        def _on_disconnect(_client: Any) -> None:
            logger.warning("BLE device %s disconnected", self._address)
            callback.on_availability_changed(data_type, False)

        def _on_notify(_sender: Any, data: bytearray) -> None:
            try:
                measurement = parse_heart_rate_measurement(data)
            except ValueError as exc:
                logger.warning("Dropping malformed HRM payload %r: %s", bytes(data), exc)
                return
            callback.on_data_received(HeartRateSample(value=float(measurement.bpm)))

        client = self._client_factory(self._address, disconnected_callback=_on_disconnect)
        logger.info("Connecting to BLE device %s", self._address)
        await client.connect()
        try:
            await client.start_notify(HR_MEASUREMENT_UUID, _on_notify)
        except Exception:
            await client.disconnect()
            raise
        self._client = client
        self._callback = callback
        callback.on_availability_changed(data_type, True)

    async def unregister(self, data_type: DataType, callback: SensorCallback) -> None:
        if self._client is None or callback is not self._callback:
            return
        client, self._client, self._callback = self._client, None, None
        try:
            if client.is_connected:
                await client.stop_notify(HR_MEASUREMENT_UUID)
        finally:
            await client.disconnect()
        logger.info("Disconnected from BLE device %s", self._address)
