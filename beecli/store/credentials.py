"""Bearer token and pairing state persistence with secure/file fallback."""

from __future__ import annotations

import logging
from typing import Callable, Optional, TypeVar

from pydantic import ValidationError as ModelValidationError

from ..config import Environment, StorageMode
from ..errors import BackendUnavailable
from ..pairing.models import PairingState
from .backend import SecretBackend
from .file import FileBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


def token_name(env: Environment) -> str:
    return f"token:{env.value}"


def pairing_name(env: Environment) -> str:
    return f"pairing:{env.value}"


class CredentialStore:
    """Stores one token and at most one pairing state per environment.

    In ``AUTO`` mode the secure backend is tried first. The first time it is
    reported unavailable the store switches to ``FILE`` for the rest of its
    lifetime and emits a single notice. Clearing always removes the file
    artifacts as well, whatever the active backend.
    """

    def __init__(
        self,
        secure: Optional[SecretBackend],
        files: FileBackend,
        mode: StorageMode = StorageMode.AUTO,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        if secure is None and mode is not StorageMode.FILE:
            raise ValueError("A secure backend is required unless mode is FILE")
        self.secure = secure
        self.files = files
        self.mode = mode
        self._notify = notify

    @property
    def using_files(self) -> bool:
        return self.mode is StorageMode.FILE

    def _fall_back(self, exc: BackendUnavailable) -> None:
        if self.mode is not StorageMode.AUTO:
            raise exc
        self.mode = StorageMode.FILE
        message = (
            f"Keychain not available, using file-based token storage ({self.files.directory})"
        )
        logger.warning("%s: %s", message, exc)
        if self._notify is not None:
            self._notify(message)

    def _secure_call(self, op: Callable[[SecretBackend], T]) -> tuple[bool, Optional[T]]:
        """Run ``op`` on the secure backend; ``(False, None)`` means use files."""
        if self.using_files:
            return False, None
        assert self.secure is not None
        try:
            return True, op(self.secure)
        except BackendUnavailable as exc:
            self._fall_back(exc)
            return False, None

    # ------------------------------------------------------------------
    def load_token(self, env: Environment) -> Optional[str]:
        name = token_name(env)
        handled, value = self._secure_call(lambda b: b.get(name))
        if not handled or value is None:
            value = self.files.get(name)
        if value is None:
            return None
        value = value.strip()
        return value or None

    def save_token(self, env: Environment, token: str) -> None:
        name = token_name(env)
        handled, _ = self._secure_call(lambda b: b.set(name, token))
        if not handled:
            self.files.set(name, token)
        logger.debug("Stored token for %s (%s)", env.value, self.mode.value)

    def clear_token(self, env: Environment) -> None:
        name = token_name(env)
        self._secure_call(lambda b: b.delete(name))
        self.files.delete(name)

    # ------------------------------------------------------------------
    def load_pairing_state(self, env: Environment) -> Optional[PairingState]:
        name = pairing_name(env)
        handled, raw = self._secure_call(lambda b: b.get(name))
        if not handled or raw is None or not raw.strip():
            raw = self.files.get(name)
        if raw is None or not raw.strip():
            return None
        try:
            return PairingState.from_json(raw)
        except ModelValidationError:
            logger.debug("Ignoring unreadable pairing state for %s", env.value)
            return None

    def save_pairing_state(self, env: Environment, state: PairingState) -> None:
        name = pairing_name(env)
        payload = state.to_json()
        handled, _ = self._secure_call(lambda b: b.set(name, payload))
        if not handled:
            self.files.set(name, payload)

    def clear_pairing_state(self, env: Environment) -> None:
        name = pairing_name(env)
        self._secure_call(lambda b: b.delete(name))
        self.files.delete(name)
