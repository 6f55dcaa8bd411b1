"""
MCP server wiring for apirelay.

Exposes the tool registry and the presentation widget over MCP with
FastMCP. Every tool is a thin typed wrapper around ToolRegistry.dispatch();
the wrapper signatures give FastMCP the input schemas, and the dispatcher
gives back a ToolOutput that becomes a CallToolResult:

    structuredContent  the envelope (always carries `success`)
    content            one text item with the summary
    _meta              metadata plus the widget output template
"""

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent

from apirelay.client import ApiClient, create_api_client
from apirelay.schema import RelayConfig
from apirelay.tools import ToolContext, ToolOutput, ToolRegistry, build_registry
from apirelay.widget import WIDGET_MIME_TYPE, WIDGET_URI, render_widget


logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Relays tool calls to an external HTTP API. Call api_auth first when the API "
    "needs a login; the token is kept for later calls."
)


def to_call_result(output: ToolOutput) -> CallToolResult:
    """Convert a tool envelope into an MCP tool result."""
    meta = {"openai/outputTemplate": WIDGET_URI, **output.metadata}
    return CallToolResult(
        content=[TextContent(type="text", text=output.summary)],
        structuredContent=output.structured,
        isError=False,
        _meta=meta,
    )


def build_server(
    config: RelayConfig,
    *,
    client: ApiClient | None = None,
    registry: ToolRegistry | None = None,
) -> FastMCP:
    """
    Create the FastMCP server with every tool and the widget resource.

    Args:
        config: Active configuration
        client: Shared ApiClient (created from config if omitted)
        registry: Tool registry (all built-in tools if omitted)

    Returns:
        A configured, not yet running, FastMCP instance
    """
    client = client or create_api_client(config)
    registry = registry or build_registry()
    context = ToolContext(client=client, config=config)

    mcp = FastMCP(
        name=config.server_name,
        instructions=INSTRUCTIONS,
        host=config.host,
        port=config.port,
    )

    async def invoke(name: str, args: dict[str, Any]) -> CallToolResult:
        return to_call_result(await registry.dispatch(name, args, context))

    def tool(name: str):
        t = registry.get(name)
        return mcp.tool(name=t.name, title=t.title, description=t.description)

    @mcp.resource(WIDGET_URI, name="widget", mime_type=WIDGET_MIME_TYPE)
    def widget() -> str:
        """HTML widget that renders tool results."""
        return render_widget(config.server_name)

    @tool("hello_widget")
    async def hello_widget(name: str) -> CallToolResult:
        return await invoke("hello_widget", {"name": name})

    @tool("api_auth")
    async def api_auth(
        endpoint: str,
        credentials: dict[str, Any],
        tokenField: str | None = None,
    ) -> CallToolResult:
        args: dict[str, Any] = {"endpoint": endpoint, "credentials": credentials}
        if tokenField is not None:
            args["tokenField"] = tokenField
        return await invoke("api_auth", args)

    @tool("api_get")
    async def api_get(endpoint: str, params: dict[str, Any] | None = None) -> CallToolResult:
        args: dict[str, Any] = {"endpoint": endpoint}
        if params is not None:
            args["params"] = params
        return await invoke("api_get", args)

    @tool("api_post")
    async def api_post(endpoint: str, data: dict[str, Any]) -> CallToolResult:
        return await invoke("api_post", {"endpoint": endpoint, "data": data})

    @tool("api_put")
    async def api_put(endpoint: str, data: dict[str, Any]) -> CallToolResult:
        return await invoke("api_put", {"endpoint": endpoint, "data": data})

    @tool("api_patch")
    async def api_patch(endpoint: str, data: dict[str, Any]) -> CallToolResult:
        return await invoke("api_patch", {"endpoint": endpoint, "data": data})

    @tool("api_delete")
    async def api_delete(endpoint: str) -> CallToolResult:
        return await invoke("api_delete", {"endpoint": endpoint})

    @tool("get_info")
    async def get_info() -> CallToolResult:
        return await invoke("get_info", {})

    logger.debug("Built MCP server %s with tools %s", config.server_name, registry.list_tools())
    return mcp


def run(config: RelayConfig) -> None:
    """Build the server and block running it on the configured transport."""
    mcp = build_server(config)
    transport = config.transport.value
    if transport == "stdio":
        logger.info("Starting %s on stdio", config.server_name)
    else:
        logger.info("Starting %s on %s at http://%s:%s", config.server_name, transport, config.host, config.port)
    mcp.run(transport=transport)
