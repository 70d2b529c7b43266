"""Data models for pairing requests and resumable pairing state."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .crypto import PUBLIC_KEY_SIZE, KeyPair


class PendingPairing(BaseModel):
    """Request awaiting approval by the account owner."""

    status: Literal["pending"] = "pending"
    request_id: str
    expires_at: str


class CompletedPairing(BaseModel):
    """Approved request carrying the token encrypted to our public key."""

    status: Literal["completed"] = "completed"
    request_id: str
    encrypted_token: str


class ExpiredPairing(BaseModel):
    status: Literal["expired"] = "expired"
    request_id: str


PairingRequest = Union[PendingPairing, CompletedPairing, ExpiredPairing]


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, returning ``None`` when unusable."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class PairingState(BaseModel):
    """Snapshot of an in-flight agent-mode pairing, persisted between runs.

    Serialized with camelCase keys so files written by earlier releases of the
    CLI remain readable.
    """

    model_config = ConfigDict(populate_by_name=True, hide_input_in_errors=True)

    app_id: str = Field(alias="appId")
    public_key: str = Field(alias="publicKey")
    secret_key: str = Field(alias="secretKey", repr=False)
    request_id: str = Field(alias="requestId")
    pairing_url: str = Field(alias="pairingUrl")
    expires_at: str = Field(alias="expiresAt")

    @field_validator("public_key", "secret_key")
    @classmethod
    def _check_key(cls, value: str) -> str:
        try:
            raw = base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("key is not valid base64") from exc
        if len(raw) != PUBLIC_KEY_SIZE:
            raise ValueError(f"key must decode to {PUBLIC_KEY_SIZE} bytes")
        return value

    def key_pair(self) -> KeyPair:
        return KeyPair.from_base64(self.public_key, self.secret_key)

    def expires_at_datetime(self) -> Optional[datetime]:
        return parse_timestamp(self.expires_at)

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` has reached the stored expiry.

        An unparseable expiry is treated as still valid; polling applies its
        own fallback deadline in that case.
        """
        expires_at = self.expires_at_datetime()
        if expires_at is None:
            return False
        return now >= expires_at

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "PairingState":
        return cls.model_validate_json(raw)
