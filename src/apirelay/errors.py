"""
Exception hierarchy for apirelay.

All apirelay exceptions inherit from RelayError, allowing callers to catch
all apirelay-specific exceptions with a single except clause.

Exception Categories:
    - ApiError: The upstream HTTP call failed (timeout, status, transport)
    - TokenNotFoundError: Login succeeded but no token could be extracted
    - ToolError: Unknown tool or invalid tool arguments
    - ConfigError: Configuration could not be loaded or validated

Design Principles:
    - All errors have error codes for programmatic handling
    - All errors include context (endpoint, tool, status where applicable)
    - `message` is the short text placed in tool envelopes
    - Errors are designed to be both human-readable and machine-parseable
"""

import json
from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Upstream API errors: 1xxx
ERROR_API_TIMEOUT = 1001
ERROR_API_STATUS = 1002
ERROR_API_TRANSPORT = 1003
ERROR_API_DECODE = 1004

# Authentication errors: 2xxx
ERROR_AUTH_TOKEN_NOT_FOUND = 2001

# Tool errors: 3xxx
ERROR_TOOL_NOT_FOUND = 3001
ERROR_TOOL_INVALID_ARGS = 3002

# Configuration errors: 4xxx
ERROR_CONFIG_INVALID = 4001
ERROR_CONFIG_LOAD = 4002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class RelayError(Exception):
    """
    Base exception for all apirelay errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


def error_message(exc: BaseException) -> str:
    """Return the short message used in tool envelopes for any exception."""
    if isinstance(exc, RelayError):
        return exc.message
    return str(exc) or exc.__class__.__name__


# =============================================================================
# Upstream API Errors
# =============================================================================


@dataclass
class ApiError(RelayError):
    """
    Base class for failures of a single upstream HTTP call.

    Attributes:
        method: HTTP method of the failed request
        url: Fully resolved request URL
    """

    method: str = ""
    url: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "method": self.method,
            "url": self.url,
        })


@dataclass
class ApiTimeoutError(ApiError):
    """Raised when a call does not complete within the configured timeout."""

    timeout_ms: int = 0

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Request timeout after {self.timeout_ms}ms"
        if self.code == 0:
            self.code = ERROR_API_TIMEOUT
        if not self.suggestion:
            self.suggestion = "Increase API_TIMEOUT or check that the upstream API is reachable"
        super().__post_init__()
        self.context["timeout_ms"] = self.timeout_ms


@dataclass
class ApiStatusError(ApiError):
    """
    Raised when the upstream API answers with a non-2xx status.

    The decoded body is kept so callers can inspect server-provided
    error payloads.
    """

    status: int = 0
    reason: str = ""
    body: Any = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"API Error: {self.status} {self.reason} - {_dump_body(self.body)}"
        if self.code == 0:
            self.code = ERROR_API_STATUS
        super().__post_init__()
        self.context.update({
            "status": self.status,
            "reason": self.reason,
            "body": self.body,
        })


@dataclass
class ApiTransportError(ApiError):
    """Raised when a request could not be sent or no response was received."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = self.underlying_error or "Request failed"
        if self.code == 0:
            self.code = ERROR_API_TRANSPORT
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class ApiDecodeError(ApiError):
    """Raised when a JSON content type carries a body that is not valid JSON."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid JSON in response: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_API_DECODE
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


def _dump_body(body: Any) -> str:
    try:
        return json.dumps(body, ensure_ascii=False)
    except (TypeError, ValueError):
        return repr(body)


# =============================================================================
# Authentication Errors
# =============================================================================


@dataclass
class TokenNotFoundError(RelayError):
    """
    Raised when a login call succeeded but no token field was present.

    Attributes:
        endpoint: The login endpoint that was called
        response_data: The full decoded response payload
        fields: Candidate field names that were tried, in order
    """

    endpoint: str = ""
    response_data: Any = None
    fields: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Token not found in response"
        if self.code == 0:
            self.code = ERROR_AUTH_TOKEN_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Check the tokenField parameter or the response structure"
        self.context.update({
            "endpoint": self.endpoint,
            "fields": self.fields,
        })


# =============================================================================
# Tool Errors
# =============================================================================


@dataclass
class ToolError(RelayError):
    """
    Base class for tool dispatch errors.

    Attributes:
        tool: Name of the tool
        tool_args: Arguments that were provided
    """

    tool: str = ""
    tool_args: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context.update({
            "tool": self.tool,
            "tool_args": self.tool_args,
        })


@dataclass
class ToolNotFoundError(ToolError):
    """Raised when a tool is not registered."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Tool not found: {self.tool}"
        if self.code == 0:
            self.code = ERROR_TOOL_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Run `apirelay tools` to list the available tools"
        super().__post_init__()


@dataclass
class ToolInvalidArgsError(ToolError):
    """Raised when tool arguments are invalid."""

    validation_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid arguments for {self.tool}: {self.validation_error}"
        if self.code == 0:
            self.code = ERROR_TOOL_INVALID_ARGS
        super().__post_init__()
        self.context["validation_error"] = self.validation_error


# =============================================================================
# Configuration Errors
# =============================================================================


@dataclass
class ConfigError(RelayError):
    """
    Raised when configuration cannot be loaded or is invalid.

    Attributes:
        source: Where the configuration came from (file path or "environment")
        underlying_error: The original loading or validation error
    """

    source: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration from {self.source}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        self.context.update({
            "source": self.source,
            "underlying_error": self.underlying_error,
        })
