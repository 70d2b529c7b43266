from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Optional, Type, TypeVar

import yaml
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from .errors import ValidationError

TRUTHY_VALUES = ("1", "true", "on", "yes")

E = TypeVar("E", bound=Enum)


class Environment(str, Enum):
    """Remote deployment the CLI talks to."""

    PROD = "prod"
    STAGING = "staging"


class StorageMode(str, Enum):
    """Where credentials are kept."""

    AUTO = "auto"
    SECURE = "secure"
    FILE = "file"


def _choice(variable: str, value: str, kind: Type[E]) -> E:
    try:
        return kind(value.strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in kind)
        raise ValidationError(
            f"Invalid {variable} value {value!r}; expected one of: {allowed}"
        ) from None


class EnvironmentConfig(BaseModel):
    """Per-environment endpoints and the pairing application identifier."""

    label: str
    api_url: str
    pairing_url: str
    app_id: str
    connect_url: str = "https://bee.computer/connect"

    def build_pairing_url(self, request_id: str) -> str:
        return f"{self.connect_url.rstrip('/')}/{request_id}"


ENVIRONMENTS: dict[Environment, EnvironmentConfig] = {
    Environment.PROD: EnvironmentConfig(
        label="Production",
        api_url="https://api.bee.computer",
        pairing_url="https://auth.beeai-services.com",
        app_id="ph9fssu1kv1b0hns69fxf7rx",
    ),
    Environment.STAGING: EnvironmentConfig(
        label="Staging",
        api_url="https://public-api.korshaks.people.amazon.dev",
        pairing_url="https://public-api.korshaks.people.amazon.dev",
        app_id="pk5z3uuzjpxj4f7frk6rsq2f",
    ),
}


class BeeConfig(BaseModel):
    """Top-level configuration model."""

    environment: Environment = Environment.PROD
    api_url: Optional[str] = None
    storage: StorageMode = StorageMode.AUTO
    storage_dir: Optional[str] = None
    request_timeout: float = 30.0
    poll_interval: float = 2.0
    fallback_ttl: float = 300.0

    def environment_config(self, env: Optional[Environment] = None) -> EnvironmentConfig:
        """Return endpoints for ``env`` with the configured API override applied."""
        env = env or self.environment
        base = ENVIRONMENTS[env]
        if self.api_url:
            return base.model_copy(update={"api_url": self.api_url})
        return base


def resolve_config_dir() -> Path:
    """Locate the directory holding ``config.yaml``.

    ``BEE_CONFIG_DIR`` wins, then ``$XDG_CONFIG_HOME/bee``, then ``~/.config/bee``.
    """

    override = (os.getenv("BEE_CONFIG_DIR") or "").strip()
    if override:
        return Path(override).expanduser()
    xdg = (os.getenv("XDG_CONFIG_HOME") or "").strip()
    if xdg:
        return Path(xdg).expanduser() / "bee"
    return Path.home() / ".config" / "bee"


def load_config(path: Optional[str] = None) -> BeeConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to BEE_CONFIG env
            variable or 'config.yaml' in the resolved config directory.
    """

    config_path = path or os.getenv("BEE_CONFIG") or str(resolve_config_dir() / "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        try:
            config = BeeConfig(**data)
        except ModelValidationError as exc:
            raise ValidationError(f"Invalid configuration in {config_path}: {exc}") from exc
    else:
        config = BeeConfig()

    env_name = os.getenv("BEE_ENV")
    if env_name:
        config.environment = _choice("BEE_ENV", env_name, Environment)
    env_api_url = os.getenv("BEE_API_URL")
    if env_api_url:
        config.api_url = env_api_url.strip()
    env_storage = os.getenv("BEE_STORAGE")
    if env_storage:
        config.storage = _choice("BEE_STORAGE", env_storage, StorageMode)
    env_storage_dir = os.getenv("BEE_STORAGE_DIR")
    if env_storage_dir:
        config.storage_dir = env_storage_dir
    return config


def emoji_hash_enabled() -> bool:
    """Whether ``BEE_EMOJI_HASH`` asks for the public key fingerprint."""
    value = (os.getenv("BEE_EMOJI_HASH") or "").strip().lower()
    return value in TRUTHY_VALUES
