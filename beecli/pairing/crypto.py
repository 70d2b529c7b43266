"""Key material for app pairing.

The server encrypts the bearer token to the public key we submit using a NaCl
box (Curve25519, XSalsa20, Poly1305) from a throwaway sender key. The wire
format is ``base64(sender_public_key || nonce || ciphertext)``.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from dataclasses import dataclass, field

from nacl.bindings import crypto_box_BOXZEROBYTES, crypto_box_ZEROBYTES
from nacl.exceptions import CryptoError
from nacl.public import Box, PrivateKey, PublicKey

from ..errors import DecryptionError

PUBLIC_KEY_SIZE = PublicKey.SIZE
NONCE_SIZE = Box.NONCE_SIZE
MAC_SIZE = crypto_box_ZEROBYTES - crypto_box_BOXZEROBYTES

EMOJI_TABLE = (
    "🐝", "🍯", "🌻", "🌼", "🌸", "🌺", "🌷", "🌹",
    "🍀", "🌵", "🌲", "🌴", "🍄", "🌰", "🍁", "🍂",
    "🍎", "🍊", "🍋", "🍌", "🍉", "🍇", "🍓", "🍒",
    "🍑", "🍍", "🥝", "🥑", "🥕", "🌽", "🥦", "🍆",
    "🐶", "🐱", "🐭", "🐹", "🐰", "🦊", "🐻", "🐼",
    "🐨", "🐯", "🦁", "🐮", "🐷", "🐸", "🐵", "🐔",
    "🐧", "🐦", "🦉", "🦋", "🐌", "🐞", "🐢", "🐙",
    "🚀", "⛵", "🎈", "🎸", "🎲", "🔑", "💎", "⭐",
)


@dataclass(frozen=True)
class KeyPair:
    """Curve25519 key pair generated for a single pairing attempt."""

    public_key: bytes
    secret_key: bytes = field(repr=False)

    @property
    def public_key_base64(self) -> str:
        return base64.b64encode(self.public_key).decode("ascii")

    @property
    def secret_key_base64(self) -> str:
        return base64.b64encode(self.secret_key).decode("ascii")

    @classmethod
    def from_base64(cls, public_key: str, secret_key: str) -> "KeyPair":
        return cls(
            public_key=base64.b64decode(public_key),
            secret_key=base64.b64decode(secret_key),
        )


def generate_key_pair() -> KeyPair:
    """Create a fresh key pair from the OS CSPRNG."""
    private = PrivateKey.generate()
    return KeyPair(public_key=bytes(private.public_key), secret_key=bytes(private))


def encrypt_token(token: str, public_key: bytes) -> str:
    """Encrypt ``token`` to ``public_key`` the way the pairing server does."""
    sender = PrivateKey.generate()
    box = Box(sender, PublicKey(public_key))
    encrypted = box.encrypt(token.encode("utf-8"))
    payload = bytes(sender.public_key) + encrypted.nonce + encrypted.ciphertext
    return base64.b64encode(payload).decode("ascii")


def decrypt_token(ciphertext_base64: str, secret_key: bytes) -> str:
    """Open a server-delivered token with our secret key.

    Raises:
        DecryptionError: if the payload is not valid base64, is truncated, was
            encrypted to a different key, or is not UTF-8 once decrypted.
    """

    try:
        payload = base64.b64decode(ciphertext_base64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError("Encrypted token is not valid base64.") from exc

    header_size = PUBLIC_KEY_SIZE + NONCE_SIZE
    if len(payload) <= header_size + MAC_SIZE:
        raise DecryptionError("Encrypted token is truncated.")

    sender_public = payload[:PUBLIC_KEY_SIZE]
    nonce = payload[PUBLIC_KEY_SIZE:header_size]
    ciphertext = payload[header_size:]

    try:
        box = Box(PrivateKey(secret_key), PublicKey(sender_public))
        plaintext = box.decrypt(ciphertext, nonce)
    except (CryptoError, TypeError, ValueError) as exc:
        raise DecryptionError(
            "Failed to decrypt token. The CLI may be out of date."
        ) from exc

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("Decrypted token is not valid UTF-8.") from exc


def emoji_hash(public_key: bytes, length: int = 4) -> list[str]:
    """Deterministic emoji fingerprint of ``public_key`` for visual comparison."""
    digest = hashlib.sha256(public_key).digest()
    return [EMOJI_TABLE[byte % len(EMOJI_TABLE)] for byte in digest[:length]]
