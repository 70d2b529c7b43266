"""Exception hierarchy shared by the CLI, pairing flow and credential store."""

from __future__ import annotations

from typing import Optional


class BeeError(Exception):
    """Base class for errors reported to the user."""


class ValidationError(BeeError):
    """Invalid command line arguments or inputs."""


class NotLoggedIn(BeeError):
    def __init__(self, message: str = 'Not logged in. Run "bee login" first.') -> None:
        super().__init__(message)


class ApiError(BeeError):
    """Non-2xx response from the authenticated API."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PairingError(BeeError):
    """Failure while pairing the CLI with an account."""


class EndpointNotFound(PairingError):
    def __init__(self, message: str = "Pairing endpoint not found.") -> None:
        super().__init__(message)


class RequestFailed(PairingError):
    """Pairing endpoint answered with an error status."""

    def __init__(
        self, message: str, status_code: int, code: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class MalformedResponse(PairingError):
    def __init__(self, message: str = "Invalid response from developer API.") -> None:
        super().__init__(message)


class PairingExpired(PairingError):
    def __init__(self, message: str = "Pairing request expired. Please try again.") -> None:
        super().__init__(message)


class LoginTimedOut(PairingError):
    def __init__(self, message: str = "Login timed out. Please try again.") -> None:
        super().__init__(message)


class DecryptionError(PairingError):
    """Token ciphertext could not be opened with the local secret key."""


class StorageError(BeeError):
    """Credential storage failure."""


class BackendUnavailable(StorageError):
    """The platform secret store cannot be used on this machine."""
