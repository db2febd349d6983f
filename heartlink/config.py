"""Application configuration loaded from environment variables."""

import platform
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "Heartlink"
    app_version: str = "0.1.0"
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    # --- Relay endpoint ---
    relay_base_url: str = "http://localhost:8080"
    relay_endpoint_path: str = "/api/health/heartrate"
    device_id: str = Field(default=platform.node() or "unknown-device", min_length=1)

    # --- Dispatch ---
    throttle_interval_ms: int = 10_000
    auto_send_default: bool = True
    single_flight: bool = True

    # --- Sensor ---
    sensor_source: str = "simulated"  # simulated | ble
    ble_device_address: str = ""
    simulated_sample_interval_seconds: float = 1.0

    # --- Permission gate ---
    body_sensor_permission: bool = False  # host platform confirms BODY_SENSORS grant

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
