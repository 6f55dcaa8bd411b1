"""
Tools module for apirelay.

Built-in tools:
    - api_auth: Log in and keep the bearer token
    - api_get / api_post / api_put / api_patch / api_delete: One upstream call each
    - get_info: Configuration presence summary
    - hello_widget: Greeting shown in the widget

Architecture:
    - Tool: Abstract base class defining the tool interface
    - ToolRegistry: Name -> tool mapping that dispatches invocations
    - ToolContext: Runtime context passed to tools (shared client, config)
    - ToolOutput: The uniform success/error envelope
"""

from apirelay.tools.auth import ApiAuthTool, extract_token, field_extractor
from apirelay.tools.base import Tool, ToolContext, ToolOutput
from apirelay.tools.http import (
    HTTP_TOOLS,
    ApiDeleteTool,
    ApiGetTool,
    ApiPatchTool,
    ApiPostTool,
    ApiPutTool,
)
from apirelay.tools.info import GetInfoTool, HelloWidgetTool
from apirelay.tools.registry import ToolRegistry


def build_registry() -> ToolRegistry:
    """Create a registry holding every built-in tool."""
    registry = ToolRegistry()
    registry.register(HelloWidgetTool())
    registry.register(ApiAuthTool())
    for tool_cls in HTTP_TOOLS:
        registry.register(tool_cls())
    registry.register(GetInfoTool())
    return registry


__all__ = [
    "Tool",
    "ToolContext",
    "ToolOutput",
    "ToolRegistry",
    "build_registry",
    "ApiAuthTool",
    "ApiGetTool",
    "ApiPostTool",
    "ApiPutTool",
    "ApiPatchTool",
    "ApiDeleteTool",
    "GetInfoTool",
    "HelloWidgetTool",
    "extract_token",
    "field_extractor",
]
