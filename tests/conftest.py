"""Shared fakes for store and pairing tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from beecli.errors import BackendUnavailable
from beecli.store import CredentialStore, FileBackend, SecretBackend, StorageMode


class MemoryBackend(SecretBackend):
    """Secure backend stand-in keeping secrets in a dict."""

    def __init__(self) -> None:
        self.secrets: dict[str, str] = {}
        self.calls = 0

    def get(self, name: str) -> Optional[str]:
        self.calls += 1
        return self.secrets.get(name)

    def set(self, name: str, value: str) -> None:
        self.calls += 1
        self.secrets[name] = value

    def delete(self, name: str) -> None:
        self.calls += 1
        self.secrets.pop(name, None)


class UnavailableBackend(SecretBackend):
    """Secure backend that behaves like a machine without a D-Bus session."""

    def __init__(self) -> None:
        self.calls = 0

    def _fail(self):
        self.calls += 1
        raise BackendUnavailable("Cannot autolaunch D-Bus without X11 $DISPLAY")

    def get(self, name):
        self._fail()

    def set(self, name, value):
        self._fail()

    def delete(self, name):
        self._fail()


class FakeClock:
    """Controllable clock whose ``sleep`` advances time instantly."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
        self.sleeps: list[float] = []

    def __call__(self) -> datetime:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)

    def iso(self, seconds: float) -> str:
        return (self.now + timedelta(seconds=seconds)).isoformat()


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def file_backend(tmp_path) -> FileBackend:
    return FileBackend(tmp_path / "bee")


@pytest.fixture
def store(memory_backend, file_backend) -> CredentialStore:
    return CredentialStore(memory_backend, file_backend, mode=StorageMode.AUTO)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def unavailable_backend() -> UnavailableBackend:
    return UnavailableBackend()
