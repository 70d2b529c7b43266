"""App pairing: key generation, pairing requests and login flows."""

from .crypto import KeyPair, decrypt_token, emoji_hash, encrypt_token, generate_key_pair
from .models import (
    CompletedPairing,
    ExpiredPairing,
    PairingRequest,
    PairingState,
    PendingPairing,
)
from .request import PairingClient, request_pairing
from .login import PairingOrchestrator

__all__ = [
    "CompletedPairing",
    "ExpiredPairing",
    "KeyPair",
    "PairingClient",
    "PairingOrchestrator",
    "PairingRequest",
    "PairingState",
    "PendingPairing",
    "decrypt_token",
    "emoji_hash",
    "encrypt_token",
    "generate_key_pair",
    "request_pairing",
]
