"""Heart-rate sensor backends for Heartlink.

Each backend implements the SensorService ABC and pushes readings through a
SensorCallback.

Available backends:
    SimulatedHeartRateService — synthetic readings for development and tests
    BleHeartRateService       — GATT Heart Rate Service over Bluetooth LE
"""

from heartlink.config import Settings
from heartlink.sensors.adapters.ble import BleHeartRateService
from heartlink.sensors.adapters.simulated import SimulatedHeartRateService
from heartlink.sensors.base import SensorService

__all__ = [
    "BleHeartRateService",
    "SimulatedHeartRateService",
]

# Registry: source_id → service class
SENSOR_REGISTRY: dict[str, type] = {
    "simulated": SimulatedHeartRateService,
    "ble": BleHeartRateService,
}


def get_sensor_service(source_id: str) -> "type":
    """Return the sensor service class for a given source slug.

    Raises:
        KeyError: If the source_id is not registered.
    """
    if source_id not in SENSOR_REGISTRY:
        raise KeyError(
            f"No sensor registered for source '{source_id}'. "
            f"Available: {list(SENSOR_REGISTRY)}"
        )
    return SENSOR_REGISTRY[source_id]


def build_sensor_service(settings: Settings) -> SensorService:
    """Instantiate the configured sensor backend."""
    service_cls = get_sensor_service(settings.sensor_source)
    if service_cls is BleHeartRateService:
        return BleHeartRateService(settings.ble_device_address)
    return SimulatedHeartRateService(
        sample_interval_seconds=settings.simulated_sample_interval_seconds
    )
