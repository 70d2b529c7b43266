"""Pairing login flows.

Both flows generate (or restore) a key pair, register it with the pairing
endpoint, show the approval link and poll the same endpoint until the request
is approved, expires or the wall-clock deadline passes.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

import typer

from ..config import Environment, EnvironmentConfig
from ..errors import LoginTimedOut, PairingExpired
from .crypto import KeyPair, decrypt_token, emoji_hash, generate_key_pair
from .models import (
    CompletedPairing,
    ExpiredPairing,
    PairingState,
    PendingPairing,
    parse_timestamp,
)
from .present import (
    AgentSessionStatus,
    PresentationMethod,
    choose_method,
    present_pairing,
    print_agent_welcome,
)
from .request import PairingClient

if TYPE_CHECKING:
    from ..store.credentials import CredentialStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Sleeper = Callable[[float], Awaitable[None]]

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_FALLBACK_TTL = 300.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PairingOrchestrator:
    """Drives the interactive and agent (resumable) pairing flows."""

    def __init__(
        self,
        env: Environment,
        env_config: EnvironmentConfig,
        store: CredentialStore,
        client: Optional[PairingClient] = None,
        clock: Clock = utcnow,
        sleep: Sleeper = asyncio.sleep,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        fallback_ttl: float = DEFAULT_FALLBACK_TTL,
        show_fingerprint: bool = False,
        select_method: Callable[[], PresentationMethod] = choose_method,
        present: Callable[..., None] = present_pairing,
        announce: Callable[..., None] = print_agent_welcome,
    ) -> None:
        self.env = env
        self.env_config = env_config
        self.store = store
        self.client = client or PairingClient(env_config)
        self.clock = clock
        self.sleep = sleep
        self.poll_interval = poll_interval
        self.fallback_ttl = fallback_ttl
        self.show_fingerprint = show_fingerprint
        self.select_method = select_method
        self.present = present
        self.announce = announce

    @property
    def app_id(self) -> str:
        return self.env_config.app_id

    # ------------------------------------------------------------------
    async def login_interactive(self) -> str:
        """Pair with a human at the terminal and return the bearer token."""

        key_pair = generate_key_pair()
        fingerprint = None
        if self.show_fingerprint:
            fingerprint = " ".join(emoji_hash(key_pair.public_key)) or None

        initial = await self.client.request(self.app_id, key_pair.public_key_base64)
        if isinstance(initial, CompletedPairing):
            return decrypt_token(initial.encrypted_token, key_pair.secret_key)
        if isinstance(initial, ExpiredPairing):
            raise PairingExpired()

        pairing_url = self.env_config.build_pairing_url(initial.request_id)
        method = self.select_method()
        self.present(method, pairing_url, initial.request_id, fingerprint)
        typer.echo("Waiting for authorization...")

        return await self.poll_for_token(self.app_id, key_pair, initial.expires_at)

    async def login_agent(self) -> str:
        """Pair non-interactively, resuming a persisted request when possible."""

        existing = self.store.load_pairing_state(self.env)
        if existing is not None:
            if not existing.is_expired(self.clock()):
                logger.debug("Resuming pairing request %s", existing.request_id)
                self.announce(
                    existing.pairing_url,
                    existing.expires_at,
                    AgentSessionStatus.RESUMED,
                    self.clock(),
                )
                return await self._poll_and_clear(
                    existing.app_id, existing.key_pair(), existing.expires_at
                )
            logger.debug("Discarding expired pairing request %s", existing.request_id)
            self.store.clear_pairing_state(self.env)

        key_pair = generate_key_pair()
        initial = await self.client.request(self.app_id, key_pair.public_key_base64)
        if isinstance(initial, CompletedPairing):
            return decrypt_token(initial.encrypted_token, key_pair.secret_key)
        if isinstance(initial, ExpiredPairing):
            raise PairingExpired()

        pairing_url = self.env_config.build_pairing_url(initial.request_id)
        state = PairingState(
            app_id=self.app_id,
            public_key=key_pair.public_key_base64,
            secret_key=key_pair.secret_key_base64,
            request_id=initial.request_id,
            pairing_url=pairing_url,
            expires_at=initial.expires_at,
        )
        self.store.save_pairing_state(self.env, state)

        status = AgentSessionStatus.RESET if existing else AgentSessionStatus.NEW
        self.announce(pairing_url, initial.expires_at, status, self.clock())

        return await self._poll_and_clear(self.app_id, key_pair, initial.expires_at)

    async def _poll_and_clear(
        self, app_id: str, key_pair: KeyPair, expires_at: str
    ) -> str:
        try:
            token = await self.poll_for_token(app_id, key_pair, expires_at)
        except Exception:
            self.store.clear_pairing_state(self.env)
            raise
        self.store.clear_pairing_state(self.env)
        return token

    # ------------------------------------------------------------------
    def deadline_for(self, expires_at: Optional[str]) -> datetime:
        """Wall-clock deadline for polling, falling back when expiry is unusable."""
        deadline = parse_timestamp(expires_at)
        if deadline is None or deadline.timestamp() <= 0:
            return self.clock() + timedelta(seconds=self.fallback_ttl)
        return deadline

    async def poll_for_token(
        self, app_id: str, key_pair: KeyPair, expires_at: Optional[str]
    ) -> str:
        """Poll until the request completes, expires or the deadline passes.

        Only a pending status is retried; endpoint and decryption errors
        propagate immediately.
        """

        deadline = self.deadline_for(expires_at)
        attempt = 0
        while self.clock() < deadline:
            attempt += 1
            outcome = await self.client.request(app_id, key_pair.public_key_base64)
            if isinstance(outcome, CompletedPairing):
                logger.debug("Pairing approved after %d poll(s)", attempt)
                return decrypt_token(outcome.encrypted_token, key_pair.secret_key)
            if isinstance(outcome, ExpiredPairing):
                raise PairingExpired()
            assert isinstance(outcome, PendingPairing)
            await self.sleep(self.poll_interval)

        raise LoginTimedOut()
