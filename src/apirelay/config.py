"""
Runtime configuration for apirelay entry points.

Reads RelayConfig from the process environment (optionally primed from a
.env file) and configures logging. Nothing here runs at import time; the
CLI and server call init_runtime() explicitly.

Environment variables:
    API_BASE_URL        Upstream base URL (placeholder when unset)
    API_KEY             Static key sent in the api-key header
    API_KEY_HEADER      Header name for the static key
    AUTH_TOKEN          Initial bearer token
    API_TIMEOUT         Per-request timeout in milliseconds
    API_TOKEN_FIELDS    Comma separated login token field names
    PORT                Listen port for HTTP transports
    MCP_HOST            Listen address for HTTP transports
    MCP_TRANSPORT       stdio, sse or streamable-http
    APIRELAY_LOG_LEVEL  Logging level
    APIRELAY_ENV_FILE   Explicit .env path
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv

from apirelay.errors import ConfigError
from apirelay.schema import RelayConfig, build_config, load_config

logger = logging.getLogger(__name__)

# environment variable -> RelayConfig field
ENV_FIELDS = {
    "API_BASE_URL": "base_url",
    "API_KEY": "api_key",
    "API_KEY_HEADER": "api_key_header",
    "AUTH_TOKEN": "auth_token",
    "API_TIMEOUT": "timeout_ms",
    "API_TOKEN_FIELDS": "token_fields",
    "PORT": "port",
    "MCP_HOST": "host",
    "MCP_TRANSPORT": "transport",
    "APIRELAY_LOG_LEVEL": "log_level",
}


def load_env_file(path: Path | str | None = None) -> Path | None:
    """
    Load a .env file without overriding variables that are already set.

    Precedence:
      1) the explicit path argument
      2) APIRELAY_ENV_FILE
      3) ./.env

    Returns:
        The file that was loaded, or None when no candidate exists
    """
    candidates: list[Path] = []
    if path:
        candidates.append(Path(path).expanduser())
    explicit = os.getenv("APIRELAY_ENV_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(Path.cwd() / ".env")

    for p in candidates:
        if p.is_file():
            load_dotenv(dotenv_path=str(p), override=False)
            logger.debug("Loaded environment from %s", p)
            return p
    return None


def config_from_env(environ: Mapping[str, str] | None = None) -> RelayConfig:
    """
    Build a RelayConfig from environment variables.

    Unset and empty variables fall back to the model defaults.

    Raises:
        ConfigError: If a variable has an invalid value
    """
    env = os.environ if environ is None else environ
    data: dict[str, object] = {}

    for var, field_name in ENV_FIELDS.items():
        raw = env.get(var)
        if raw is None or not raw.strip():
            continue
        raw = raw.strip()
        if field_name == "token_fields":
            data[field_name] = [f.strip() for f in raw.split(",") if f.strip()]
        elif field_name in ("timeout_ms", "port"):
            try:
                data[field_name] = int(raw)
            except ValueError as e:
                raise ConfigError(
                    source="environment",
                    underlying_error=f"{var} must be an integer, got {raw!r}",
                ) from e
        else:
            data[field_name] = raw

    return build_config(data, source="environment")


def load_settings(path: Path | str | None = None) -> RelayConfig:
    """Load configuration from a YAML file when given, else from the environment."""
    config = load_config(path) if path else config_from_env()
    if not config.base_url_configured:
        logger.warning(
            "API_BASE_URL is not set; using placeholder %s. Requests will not reach a real API.",
            config.base_url,
        )
    return config


def configure_logging(level: str | None = None) -> None:
    """
    Configure root logging once.

    Logs go to stderr so the stdio transport's stdout stays clean.
    Idempotent: if logging is already configured, do nothing.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = (level or os.getenv("APIRELAY_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def init_runtime(config_path: Path | str | None = None, *, load_env: bool = True) -> RelayConfig:
    """
    Entry-point initialization: .env, settings, logging.

    Returns:
        The loaded RelayConfig
    """
    if load_env:
        load_env_file()
    config = load_settings(config_path)
    configure_logging(config.log_level)
    return config
