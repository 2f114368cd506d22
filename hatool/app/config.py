"""Configuration management for hatool."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

URL_ENV_VAR = "HA_API_URL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_server_url(env: Mapping[str, str]) -> str:
    """Return the fallback Home Assistant API URL from an environment snapshot.

    Args:
        env: Environment mapping to read from.

    Returns:
        The configured URL, or an empty string when unset.
    """
    return env.get(URL_ENV_VAR, "")


class HomeAssistantToolConfig(BaseSettings):
    """Configuration for the Home Assistant tool.

    Values are read from environment variables using the names the
    Home Assistant tool has always used (HA_API_URL, HA_API_KEY). The
    log level is the unprefixed LOG_LEVEL.
    """

    model_config = SettingsConfigDict(
        env_prefix="HA_",
        extra="ignore",
    )

    # Base URL of the REST API, including the /api suffix
    api_url: str = ""
    api_key: SecretStr = Field(default=SecretStr(""))

    # Seconds to wait for a service call to settle, None waits forever
    ws_timeout: float | None = None

    # Raise RemoteInvocationError instead of returning the failure message
    raise_on_error: bool = False

    log_level: str = Field(default="INFO", validation_alias=AliasChoices("log_level", "LOG_LEVEL"))

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL."""
        return v.strip().rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("ws_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        """Reject non-positive timeouts."""
        if v is not None and v <= 0:
            raise ValueError("ws_timeout must be positive")
        return v

    @property
    def websocket_url(self) -> str:
        """Get the WebSocket URL derived from the REST base URL."""
        return to_websocket_url(self.api_url)


def to_websocket_url(api_url: str) -> str:
    """Convert a REST base URL into the controller's WebSocket URL.

    ``http://host:8123/api`` becomes ``ws://host:8123/api/websocket`` and
    ``https`` maps to ``wss``.
    """
    base = api_url.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://") :]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://") :]
    return f"{base}/websocket"


def load_config(
    env: Mapping[str, str] | None = None,
    url: str | None = None,
    token: str | None = None,
) -> HomeAssistantToolConfig:
    """Load configuration once from explicit values and the environment.

    Priority (highest to lowest):
    1. Explicit url / token arguments
    2. The environment snapshot (os.environ when not given)
    3. Defaults

    Returns:
        Validated HomeAssistantToolConfig instance.
    """
    snapshot = dict(os.environ if env is None else env)

    # Every field is passed explicitly so only the snapshot is consulted.
    # Raw strings are left for pydantic to coerce and validate.
    return HomeAssistantToolConfig(
        api_url=url or resolve_server_url(snapshot),
        api_key=token if token is not None else snapshot.get("HA_API_KEY", ""),
        ws_timeout=snapshot.get("HA_WS_TIMEOUT") or None,
        raise_on_error=snapshot.get("HA_RAISE_ON_ERROR") or False,
        log_level=snapshot.get("LOG_LEVEL") or "INFO",
    )
