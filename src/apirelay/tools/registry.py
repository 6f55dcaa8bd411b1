"""
Tool registry and dispatcher for apirelay.

The registry maps tool names to Tool instances and dispatches invocations.
dispatch() is the single entry the transport calls: it validates the
arguments, awaits the tool, and always returns a ToolOutput. The only
exception it raises is ToolNotFoundError for an unknown name.

Usage:
    registry = build_registry()
    output = await registry.dispatch("api_get", {"endpoint": "/users"}, context)
"""

import logging
import time
from typing import Any, Iterator

from apirelay.errors import ToolInvalidArgsError, ToolNotFoundError, error_message
from apirelay.tools.base import Tool, ToolContext, ToolOutput, utc_timestamp


logger = logging.getLogger(__name__)

_REDACTION_KEYS = {
    "credentials",
    "password",
    "token",
    "access_token",
    "accesstoken",
    "authorization",
    "api_key",
    "apikey",
}


def sanitize_args_for_log(args: dict[str, Any] | None) -> dict[str, Any]:
    """Replace obvious secrets in tool arguments before logging them."""
    out: dict[str, Any] = {}
    for k, v in (args or {}).items():
        out[str(k)] = "***redacted***" if str(k).lower() in _REDACTION_KEYS else v
    return out


class ToolRegistry:
    """
    Registry for looking up and dispatching tools by name.

    Attributes:
        _tools: Internal mapping of tool names to tool instances
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: dict[str, Tool] = {}

    def register(self, tool: Tool) -> None:
        """
        Register a tool, replacing any tool with the same name.

        Raises:
            ValueError: If tool is None or has an empty name
        """
        if tool is None:
            msg = "Cannot register None as a tool"
            raise ValueError(msg)

        name = tool.name
        if not name:
            msg = "Tool must have a non-empty name"
            raise ValueError(msg)

        if name in self._tools:
            logger.debug("Replacing registered tool %s", name)

        self._tools[name] = tool

    def get(self, name: str) -> Tool:
        """
        Look up a tool by name.

        Raises:
            ToolNotFoundError: If no tool with that name is registered
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(tool=name)
        return tool

    def get_optional(self, name: str) -> Tool | None:
        """Look up a tool by name, returning None if not found."""
        return self._tools.get(name)

    def has(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    def unregister(self, name: str) -> bool:
        """Remove a tool; returns False if it wasn't registered."""
        if name in self._tools:
            del self._tools[name]
            return True
        return False

    def list_tools(self) -> list[str]:
        """List all registered tool names in sorted order."""
        return sorted(self._tools.keys())

    async def dispatch(
        self,
        name: str,
        args: dict[str, Any] | None,
        context: ToolContext,
    ) -> ToolOutput:
        """
        Run one tool invocation to completion.

        Args:
            name: Tool name
            args: Tool arguments (already shaped by the transport)
            context: Shared runtime context

        Returns:
            The tool's envelope. Invalid arguments and unexpected tool
            failures are folded into a failure envelope.

        Raises:
            ToolNotFoundError: If no tool with that name is registered
        """
        tool = self.get(name)
        args = dict(args or {})
        endpoint = args.get("endpoint")

        errors = tool.validate_args(args)
        if errors:
            err = ToolInvalidArgsError(tool=name, tool_args=args, validation_error="; ".join(errors))
            logger.info("Tool %s rejected: %s", name, err.validation_error)
            return ToolOutput.fail(
                err.message,
                endpoint=endpoint,
                timestamp=utc_timestamp(),
            )

        t0 = time.perf_counter()
        try:
            output = await tool.execute(args, context)
        except Exception as e:
            logger.exception("Tool %s raised", name)
            output = ToolOutput.fail(
                error_message(e),
                summary=f"Tool {name} failed: {error_message(e)}",
                endpoint=endpoint,
                timestamp=utc_timestamp(),
            ).with_metadata(errorDetails=repr(e))

        logger.info(
            "Tool %s args=%s ok=%s ms=%s",
            name,
            sanitize_args_for_log(args),
            output.success,
            int((time.perf_counter() - t0) * 1000),
        )
        return output

    def __len__(self) -> int:
        """Return the number of registered tools."""
        return len(self._tools)

    def __iter__(self) -> Iterator[Tool]:
        """Iterate over all registered tools."""
        return iter(self._tools.values())

    def __contains__(self, name: str) -> bool:
        """Check if a tool is registered using 'in' operator."""
        return name in self._tools

    def __repr__(self) -> str:
        """String representation of the registry."""
        tools = ", ".join(self.list_tools())
        return f"<ToolRegistry: [{tools}]>"
