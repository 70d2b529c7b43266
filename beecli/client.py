"""Authenticated access to the Bee API using stored credentials."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import BaseModel

from .config import Environment, EnvironmentConfig
from .errors import ApiError, NotLoggedIn
from .store import CredentialStore

logger = logging.getLogger(__name__)


class ClientUser(BaseModel):
    """Account the bearer token belongs to."""

    id: int
    first_name: str
    last_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


def require_token(store: CredentialStore, env: Environment) -> str:
    """Return the stored bearer token for ``env`` or raise :class:`NotLoggedIn`."""
    token = store.load_token(env)
    if not token:
        raise NotLoggedIn()
    return token


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("error", "message"):
            if isinstance(payload.get(key), str):
                return payload[key]
    return f"Request failed with status {response.status_code}"


async def request_json(
    env_config: EnvironmentConfig,
    token: str,
    path: str,
    method: str = "GET",
    json: Any = None,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 30.0,
) -> Any:
    """Send an authenticated request and decode the JSON response body."""

    url = env_config.api_url.rstrip("/") + path
    headers = {"Authorization": f"Bearer {token}"}
    logger.debug("%s %s", method, url)

    try:
        if client is not None:
            response = await client.request(
                method, url, headers=headers, json=json, timeout=timeout
            )
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.request(method, url, headers=headers, json=json)
    except httpx.HTTPError as exc:
        raise ApiError(f"Could not reach the API: {exc}") from exc

    if not response.is_success:
        raise ApiError(_error_message(response), status_code=response.status_code)
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


async def fetch_me(
    env_config: EnvironmentConfig,
    token: str,
    client: Optional[httpx.AsyncClient] = None,
) -> ClientUser:
    data = await request_json(env_config, token, "/v1/me", client=client)
    if not isinstance(data, dict):
        raise ApiError("Invalid response from API.")
    try:
        return ClientUser.model_validate(data)
    except ValueError as exc:
        raise ApiError("Invalid response from API.") from exc
