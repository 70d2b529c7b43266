"""Storage backend interface for persisted secrets."""

from __future__ import annotations

import abc
from typing import Optional

UNAVAILABLE_SIGNATURES = (
    "libsecret",
    "keychain",
    "secret service",
    "secretservice",
    "dbus",
    "d-bus",
    "no recommended backend",
    "no keyring",
)


def is_unavailable_error(exc: BaseException) -> bool:
    """Whether ``exc`` means the platform secret store is absent, not broken."""
    message = str(exc).lower()
    return any(signature in message for signature in UNAVAILABLE_SIGNATURES)


class SecretBackend(metaclass=abc.ABCMeta):
    """Key/value store for secrets addressed by ``name``."""

    @abc.abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Return the stored value or ``None`` when absent."""
        raise NotImplementedError

    @abc.abstractmethod
    def set(self, name: str, value: str) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, name: str) -> None:
        """Remove ``name``; deleting a missing secret is not an error."""
        raise NotImplementedError
