"""Platform secret store backend (macOS Keychain, Secret Service, Windows)."""

from __future__ import annotations

import logging
from typing import Optional

import keyring
from keyring.errors import NoKeyringError, PasswordDeleteError

from ..errors import BackendUnavailable, StorageError
from .backend import SecretBackend, is_unavailable_error

logger = logging.getLogger(__name__)

SERVICE_NAME = "bee-cli"


class KeyringBackend(SecretBackend):
    """Stores secrets under ``(service, name)`` with the ``keyring`` library.

    Failures are translated: a missing or unusable platform store raises
    :class:`BackendUnavailable`, anything else :class:`StorageError`.
    """

    def __init__(self, service: str = SERVICE_NAME) -> None:
        self.service = service

    def _translate(self, exc: Exception) -> StorageError:
        if isinstance(exc, NoKeyringError) or is_unavailable_error(exc):
            return BackendUnavailable(str(exc))
        return StorageError(f"Secure storage failed: {exc}")

    def get(self, name: str) -> Optional[str]:
        try:
            return keyring.get_password(self.service, name)
        except Exception as exc:  # backends raise their own exception types
            raise self._translate(exc) from exc

    def set(self, name: str, value: str) -> None:
        try:
            keyring.set_password(self.service, name, value)
        except Exception as exc:  # backends raise their own exception types
            raise self._translate(exc) from exc

    def delete(self, name: str) -> None:
        try:
            keyring.delete_password(self.service, name)
        except PasswordDeleteError:
            logger.debug("No secure entry %s to delete", name)
        except Exception as exc:  # backends raise their own exception types
            raise self._translate(exc) from exc
