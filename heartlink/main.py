"""Heartlink — FastAPI application entry point.

Run locally:
    uvicorn heartlink.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI

from heartlink.config import Settings, get_settings
from heartlink.permissions import PermissionGate
from heartlink.relay.client import RelayClient
from heartlink.relay.monitor import HeartRateMonitor
from heartlink.relay.policy import DispatchPolicy, DispatchState
from heartlink.routers import health, relay
from heartlink.sensors.adapters import build_sensor_service
from heartlink.sensors.stream import SensorStreamAdapter

# ---------- Logging ----------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("heartlink")


def build_monitor(settings: Settings, http_client: httpx.AsyncClient) -> HeartRateMonitor:
    """Wire sensor, policy and relay client from settings."""
    relay_client = RelayClient(
        settings.relay_base_url,
        settings.device_id,
        http_client,
        endpoint_path=settings.relay_endpoint_path,
    )
    policy = DispatchPolicy(
        DispatchState(auto_send_enabled=settings.auto_send_default),
        throttle_interval_ms=settings.throttle_interval_ms,
    )
    adapter = SensorStreamAdapter(build_sensor_service(settings))
    return HeartRateMonitor(adapter, policy, relay_client, single_flight=settings.single_flight)


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings: Settings = app.state.settings
    logger.setLevel(settings.log_level.upper())
    logger.info(
        "Starting Heartlink v%s [%s] → %s",
        settings.app_version,
        settings.environment,
        settings.relay_base_url,
    )
    async with httpx.AsyncClient() as http_client:
        monitor = build_monitor(settings, http_client)
        gate = PermissionGate(monitor)
        app.state.monitor = monitor
        app.state.permission_gate = gate
        await gate.set_granted(settings.body_sensor_permission)
        yield
        await monitor.aclose()
    logger.info("Heartlink shut down")


# ---------- App factory ----------

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Relays live heart-rate readings from a wearable sensor to a remote server.",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ---------- Health check (outside v1 prefix — always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    app.include_router(relay.router, prefix="/api/v1")

    return app


app = create_app()
