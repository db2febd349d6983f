"""Tests for the HTTP control surface (health, status, manual send, toggles)."""

from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from heartlink.config import Settings
from heartlink.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment="test",
        relay_base_url="http://relay.invalid",
        sensor_source="simulated",
        simulated_sample_interval_seconds=0.01,
        auto_send_default=False,
        body_sensor_permission=False,
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "test"
        assert body["collecting"] is False

    def test_health_before_startup(self, settings: Settings) -> None:
        response = TestClient(create_app(settings)).get("/health")
        assert response.status_code == 200
        assert response.json()["collecting"] is False

    def test_title_from_settings(self, settings: Settings) -> None:
        settings.app_name = "Heartlink Test"
        assert create_app(settings).title == "Heartlink Test"


class TestSettings:
    def test_empty_device_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(device_id="")


class TestPermissionGate:
    def test_not_collecting_without_permission(self, client: TestClient) -> None:
        body = client.get("/api/v1/relay/status").json()
        assert body["permission_granted"] is False
        assert body["running"] is False
        assert body["last_status_message"] == "Body sensor permission required"
        assert body["heart_rate_text"] == "Sensor warming up..."

    def test_grant_starts_and_revoke_stops(self, client: TestClient) -> None:
        granted = client.put("/api/v1/relay/permission", json={"granted": True}).json()
        assert granted["permission_granted"] is True
        assert granted["running"] is True
        assert granted["last_status_message"] == ""

        revoked = client.put("/api/v1/relay/permission", json={"granted": False}).json()
        assert revoked["permission_granted"] is False
        assert revoked["running"] is False
        assert revoked["last_status_message"] == "Body sensor permission required"

    def test_granted_at_startup(self, settings: Settings) -> None:
        settings.body_sensor_permission = True
        with TestClient(create_app(settings)) as client:
            body = client.get("/api/v1/relay/status").json()
        assert body["permission_granted"] is True
        assert body["running"] is True


class TestControls:
    def test_manual_send_without_reading(self, client: TestClient) -> None:
        response = client.post("/api/v1/relay/send")
        assert response.status_code == 200
        body = response.json()
        assert body["outcome"] == "no_data"
        assert body["status"]["last_status_message"] == "No heart-rate data"
        assert body["status"]["last_status_tone"] == "info"

    def test_toggle_auto_send(self, client: TestClient) -> None:
        assert client.get("/api/v1/relay/status").json()["auto_send_enabled"] is False

        body = client.put("/api/v1/relay/auto-send", json={"enabled": True}).json()
        assert body["auto_send_enabled"] is True

        body = client.put("/api/v1/relay/auto-send", json={"enabled": False}).json()
        assert body["auto_send_enabled"] is False

    def test_auto_send_body_validated(self, client: TestClient) -> None:
        response = client.put("/api/v1/relay/auto-send", json={})
        assert response.status_code == 422
