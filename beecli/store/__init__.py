"""Credential storage for bearer tokens and pairing state."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

from ..config import BeeConfig, StorageMode, load_config
from .backend import SecretBackend, is_unavailable_error
from .credentials import CredentialStore
from .file import FileBackend
from .secure import KeyringBackend


def get_credential_store(
    config: Optional[BeeConfig] = None,
    notify: Optional[Callable[[str], None]] = None,
) -> CredentialStore:
    """Factory function to obtain the credential store.

    ``storage: file`` (or ``BEE_STORAGE=file``) skips the platform secret store
    entirely; ``auto`` prefers it and falls back to files when unavailable.
    """

    config = config or load_config()
    mode = StorageMode(config.storage)
    directory = Path(config.storage_dir).expanduser() if config.storage_dir else None
    files = FileBackend(directory)
    secure = None if mode is StorageMode.FILE else KeyringBackend()
    return CredentialStore(secure, files, mode=mode, notify=notify)


__all__ = [
    "CredentialStore",
    "FileBackend",
    "KeyringBackend",
    "SecretBackend",
    "StorageMode",
    "get_credential_store",
    "is_unavailable_error",
]
