"""
Schema definitions for apirelay.

This module defines the Pydantic models used throughout apirelay:
- RelayConfig: Upstream API settings plus server settings
- TransportKind: Which MCP transport the server runs on

Design Decisions:
    - The configuration is immutable once constructed (frozen=True)
    - Unknown keys are rejected (extra="forbid")
    - Every option has a documented default
    - YAML files use the same field names as the model
"""

from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from apirelay import __version__
from apirelay.errors import ERROR_CONFIG_LOAD, ConfigError


# Used when API_BASE_URL is not set; never a valid target
PLACEHOLDER_BASE_URL = "https://api.example.com"

DEFAULT_TIMEOUT_MS = 30000
DEFAULT_TOKEN_FIELDS = ("token", "accessToken", "access_token")


# =============================================================================
# Enums
# =============================================================================


class TransportKind(str, Enum):
    """MCP transports supported by the server."""

    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"


# =============================================================================
# Configuration Models
# =============================================================================


def default_headers() -> dict[str, str]:
    """Built-in headers; configured headers are layered over these."""
    return {
        "Content-Type": "application/json",
        "User-Agent": f"apirelay/{__version__}",
    }


class RelayConfig(BaseModel):
    """
    Complete apirelay configuration.

    Attributes:
        base_url: Absolute base URL of the upstream API
        api_key: Static key sent on every request (optional)
        api_key_header: Header name used for the static key
        auth_token: Initial bearer token (optional)
        headers: Default headers sent on every request
        timeout_ms: Per-request timeout in milliseconds
        token_fields: Ordered response fields probed for a login token
        server_name: Name the MCP server announces
        host: Address the HTTP transports listen on
        port: Port the HTTP transports listen on
        transport: MCP transport to run
        log_level: Logging level name
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = Field(
        default=PLACEHOLDER_BASE_URL,
        description="Absolute base URL of the upstream API",
    )
    api_key: str | None = Field(
        default=None,
        description="Static API key sent on every request",
    )
    api_key_header: str = Field(
        default="api-key",
        description="Header name used for the static API key",
        min_length=1,
    )
    auth_token: str | None = Field(
        default=None,
        description="Initial bearer token",
    )
    headers: dict[str, str] = Field(
        default_factory=default_headers,
        description="Headers sent on every request, over the built-in ones",
    )
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        description="Per-request timeout in milliseconds",
        gt=0,
    )
    token_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TOKEN_FIELDS),
        description="Ordered response fields probed for a login token",
    )
    server_name: str = Field(
        default="api-integration-app",
        description="Name the MCP server announces",
        min_length=1,
    )
    host: str = Field(
        default="0.0.0.0",
        description="Address the HTTP transports listen on",
    )
    port: int = Field(
        default=3000,
        description="Port the HTTP transports listen on",
        gt=0,
        lt=65536,
    )
    transport: TransportKind = Field(
        default=TransportKind.STREAMABLE_HTTP,
        description="MCP transport to run",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level name",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Base URL must be absolute http(s)."""
        if not v.startswith(("http://", "https://")):
            msg = f"base_url must be an absolute http(s) URL: {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("api_key", "auth_token")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        """Treat empty strings as unset."""
        return v or None

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Upper-case the level name."""
        return v.strip().upper() or "INFO"

    @property
    def timeout_seconds(self) -> float:
        """The timeout as seconds, for asyncio."""
        return self.timeout_ms / 1000

    @property
    def base_url_configured(self) -> bool:
        """Whether a real base URL was supplied."""
        return self.base_url != PLACEHOLDER_BASE_URL


# =============================================================================
# YAML Loading Helpers
# =============================================================================


def load_config(path: Path | str) -> RelayConfig:
    """
    Load a configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated RelayConfig object

    Raises:
        ConfigError: If the file cannot be read or does not match the schema
    """
    path = Path(path)
    try:
        with path.open() as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            source=str(path),
            underlying_error=str(e),
            code=ERROR_CONFIG_LOAD,
        ) from e

    return load_config_from_string(content, source=str(path))


def load_config_from_string(content: str, source: str = "<string>") -> RelayConfig:
    """Load a configuration from a YAML string."""
    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ConfigError(source=source, underlying_error=str(e), code=ERROR_CONFIG_LOAD) from e

    return build_config(data, source=source)


def build_config(data: dict[str, Any], source: str = "<dict>") -> RelayConfig:
    """Validate a mapping into a RelayConfig, raising ConfigError on failure."""
    if not isinstance(data, dict):
        raise ConfigError(source=source, underlying_error="top-level value must be a mapping")
    try:
        return RelayConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(source=source, underlying_error=str(e)) from e
