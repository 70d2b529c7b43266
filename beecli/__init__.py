"""Bee CLI: pair with a Bee account and call the developer API."""

from .config import BeeConfig, Environment, load_config
from .client import fetch_me, request_json, require_token
from .pairing import PairingOrchestrator, decrypt_token, generate_key_pair, request_pairing
from .store import CredentialStore, StorageMode, get_credential_store

__version__ = "0.3.0"
__all__ = [
    "BeeConfig",
    "CredentialStore",
    "Environment",
    "PairingOrchestrator",
    "StorageMode",
    "decrypt_token",
    "fetch_me",
    "generate_key_pair",
    "get_credential_store",
    "load_config",
    "request_json",
    "request_pairing",
    "require_token",
]
