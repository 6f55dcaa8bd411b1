"""
Base classes for the tool interface.

This module defines the core abstractions for tools in apirelay:
- Tool: Abstract base class that all tools must implement
- ToolContext: Runtime context passed to tools during execution
- ToolOutput: The uniform result envelope returned by every tool

Design Principles:
    - Tools are stateless - the shared ApiClient comes from ToolContext
    - Tools are boundaries - every client error becomes a failure envelope
    - Tools are registered by name - the registry handles lookup
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from apirelay.client import ApiClient
    from apirelay.schema import RelayConfig


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string ending in Z."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ToolOutput:
    """
    Uniform result envelope from tool execution.

    Attributes:
        success: Whether the tool call succeeded
        content: Envelope fields other than success (data, status, endpoint, ...)
        summary: One-line human-readable text
        metadata: Informational extras (response headers, error details)
    """

    success: bool
    content: dict[str, Any] = field(default_factory=dict)
    summary: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(cls, content: dict[str, Any], summary: str, **metadata: Any) -> "ToolOutput":
        """Create a successful output."""
        return cls(success=True, content=content, summary=summary, metadata=metadata)

    @classmethod
    def fail(cls, error: str, summary: str | None = None, **content: Any) -> "ToolOutput":
        """
        Create a failed output.

        Extra keyword arguments become envelope fields (endpoint, timestamp...).
        """
        return cls(
            success=False,
            content={"error": error, **content},
            summary=summary or error,
        )

    def with_metadata(self, **metadata: Any) -> "ToolOutput":
        """Return a copy with extra metadata merged in."""
        return ToolOutput(
            success=self.success,
            content=self.content,
            summary=self.summary,
            metadata={**self.metadata, **metadata},
        )

    @property
    def error(self) -> str | None:
        """The error message of a failed output."""
        return self.content.get("error")

    @property
    def structured(self) -> dict[str, Any]:
        """The envelope as a single dict, always carrying `success`."""
        return {"success": self.success, **self.content}


@dataclass
class ToolContext:
    """
    Runtime context passed to tools during execution.

    Attributes:
        client: The shared ApiClient (and through it, the shared AuthState)
        config: The active configuration
        metadata: Additional context-specific metadata
    """

    client: "ApiClient"
    config: "RelayConfig"
    metadata: dict[str, Any] = field(default_factory=dict)


class Tool(ABC):
    """
    Abstract base class for all apirelay tools.

    Subclasses must implement:
    - name property: Returns the tool's unique identifier
    - execute(): Performs the tool's action

    Example:
        class EchoTool(Tool):
            @property
            def name(self) -> str:
                return "echo"

            async def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
                return ToolOutput.ok({"message": args.get("message", "")}, "Echoed")
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The unique identifier for this tool (e.g., "api_get")."""
        ...

    @property
    def title(self) -> str:
        """Short display title."""
        return self.name

    @property
    def description(self) -> str:
        """Human-readable description of what the tool does."""
        return f"Tool: {self.name}"

    @abstractmethod
    async def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        """
        Execute the tool with the given arguments.

        Args:
            args: The arguments for this tool call (tool-specific)
            context: Runtime context with the shared client

        Returns:
            ToolOutput indicating success or failure

        Note:
            Implementations must not let client errors escape; use
            ToolOutput.fail() instead.
        """
        ...

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        """
        Validate the arguments for this tool.

        The default implementation accepts any arguments.

        Returns:
            List of validation error messages (empty if valid)
        """
        return []

    def __repr__(self) -> str:
        """String representation of the tool."""
        return f"<Tool: {self.name}>"
