"""HTTP client for the heart-rate relay server.

Endpoint:
    POST {base_url}/api/health/heartrate
        body:     {"heart_rate": float, "timestamp": epoch_ms, "device_id": str}
        response: {"success": bool, "message": str}

Single attempt per call: no retry, no backoff, and the transport's default
timeout.  Every failure is returned as a RelayFailure value; nothing is
raised to the caller.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Union

import httpx

from heartlink.models.relay import HeartRatePayload, RelayResponse
from heartlink.sensors.base import epoch_millis

logger = logging.getLogger("heartlink.relay.client")

DEFAULT_ENDPOINT_PATH = "/api/health/heartrate"

#: Shown for any transport-level failure; the underlying error is only logged.
NETWORK_ERROR_MESSAGE = "Network error"


class FailureKind(str, enum.Enum):
    TRANSPORT = "transport"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RelaySuccess:
    message: str


@dataclass(frozen=True)
class RelayFailure:
    reason: str
    kind: FailureKind


RelayResult = Union[RelaySuccess, RelayFailure]


class RelayClient:
    """Relay heart-rate payloads to the remote server.

    Usage::

        async with httpx.AsyncClient() as http:
            client = RelayClient("https://relay.example", "watch-01", http)
            result = await client.send(client.build_payload(72.0))
    """

    def __init__(
        self,
        base_url: str,
        device_id: str,
        http_client: httpx.AsyncClient,
        endpoint_path: str = DEFAULT_ENDPOINT_PATH,
    ) -> None:
        """Initialize the relay client.

        Args:
            base_url:      Server origin, e.g. ``https://relay.example``.
            device_id:     Identifier stamped on every payload.
            http_client:   Shared httpx client; owned by the caller.
            endpoint_path: Path of the heart-rate endpoint.
        """
        self._url = base_url.rstrip("/") + "/" + endpoint_path.lstrip("/")
        self._device_id = device_id
        self._http_client = http_client

    @property
    def url(self) -> str:
        return self._url

    @property
    def device_id(self) -> str:
        return self._device_id

    def build_payload(self, heart_rate: float) -> HeartRatePayload:
        return HeartRatePayload(
            heart_rate=heart_rate,
            timestamp=epoch_millis(),
            device_id=self._device_id,
        )

    async def send(self, payload: HeartRatePayload) -> RelayResult:
        """POST one payload and classify the outcome.

        Returns:
            RelaySuccess with the server message when ``success`` is true,
            RelayFailure(REJECTED) with the server message when false,
            RelayFailure(TRANSPORT) with a generic message on any transport,
            HTTP status or decoding error.
        """
        logger.info("Sending heart rate to server: %s", payload.heart_rate)
        try:
            response = await self._http_client.post(self._url, json=payload.model_dump())
            response.raise_for_status()
            body = RelayResponse.model_validate(response.json())
        except Exception as exc:
            logger.warning("Relay request to %s failed: %r", self._url, exc)
            return RelayFailure(reason=NETWORK_ERROR_MESSAGE, kind=FailureKind.TRANSPORT)

        if body.success:
            logger.info("Relay accepted heart rate: %s", body.message)
            return RelaySuccess(message=body.message)

        logger.warning("Relay rejected heart rate: %s", body.message)
        return RelayFailure(reason=body.message, kind=FailureKind.REJECTED)
