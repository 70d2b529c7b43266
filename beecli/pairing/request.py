"""HTTP client for the app pairing endpoint.

A single POST both creates a pairing request for ``(app_id, publicKey)`` and
polls its status on subsequent calls with the same key.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..config import EnvironmentConfig
from ..errors import (
    EndpointNotFound,
    MalformedResponse,
    PairingError,
    RequestFailed,
    ValidationError,
)
from .models import CompletedPairing, ExpiredPairing, PairingRequest, PendingPairing

logger = logging.getLogger(__name__)

PAIRING_PATH = "/apps/pairing/request"


def _safe_json(response: httpx.Response) -> Optional[dict[str, Any]]:
    try:
        parsed = response.json()
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_pairing_response(response: httpx.Response) -> PairingRequest:
    """Classify a pairing endpoint response or raise the matching error."""

    if not response.is_success:
        payload = _safe_json(response)
        error = payload.get("error") if payload else None
        code = error if isinstance(error, str) else None
        if response.status_code == 404 and (code is None or code == "Not Found"):
            raise EndpointNotFound()
        message = code or f"Request failed with status {response.status_code}"
        raise RequestFailed(message, status_code=response.status_code, code=code)

    data = _safe_json(response)
    if data is None or data.get("ok") is not True:
        raise MalformedResponse()

    status = data.get("status")
    request_id = data.get("requestId")
    if not isinstance(request_id, str):
        raise MalformedResponse()

    if status == "pending":
        expires_at = data.get("expiresAt")
        if not isinstance(expires_at, str):
            raise MalformedResponse()
        return PendingPairing(request_id=request_id, expires_at=expires_at)

    if status == "completed":
        result = data.get("result")
        encrypted = result.get("encryptedToken") if isinstance(result, dict) else None
        if not isinstance(encrypted, str):
            raise MalformedResponse()
        return CompletedPairing(request_id=request_id, encrypted_token=encrypted)

    if status == "expired":
        return ExpiredPairing(request_id=request_id)

    raise MalformedResponse()


class PairingClient:
    """Issues pairing create/poll calls against one environment.

    Each call is a single attempt; retry timing belongs to the caller. Calls
    may be interrupted by cancelling the awaiting task, e.g. through
    ``asyncio.wait_for``.
    """

    def __init__(
        self,
        env: EnvironmentConfig,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.env = env
        self._client = client
        self.timeout = timeout

    async def request(self, app_id: str, public_key: str) -> PairingRequest:
        if not public_key:
            raise ValidationError("Public key is required for pairing.")
        if not app_id:
            raise ValidationError("App id is required for pairing.")

        url = self.env.pairing_url.rstrip("/") + PAIRING_PATH
        body = {"app_id": app_id, "publicKey": public_key}

        try:
            if self._client is not None:
                response = await self._client.post(url, json=body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, json=body)
        except httpx.HTTPError as exc:
            raise PairingError(f"Could not reach the pairing endpoint: {exc}") from exc

        outcome = parse_pairing_response(response)
        logger.debug(
            "Pairing request %s is %s", outcome.request_id, outcome.status
        )
        return outcome


async def request_pairing(
    env: EnvironmentConfig,
    app_id: str,
    public_key: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 30.0,
) -> PairingRequest:
    """Create or poll the pairing request for ``public_key``."""
    return await PairingClient(env, client=client, timeout=timeout).request(
        app_id, public_key
    )
