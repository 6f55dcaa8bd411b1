"""
Introspection and greeting tools for apirelay.

- get_info: Server identity plus configuration presence flags. Reports
  whether a static key, an environment token and an in-memory token exist;
  never their values.
- hello_widget: Greets a user; used to show the presentation widget.
"""

from typing import Any

from apirelay import __version__
from apirelay.tools.base import Tool, ToolContext, ToolOutput, utc_timestamp


FEATURES = ["api-integration", "widgets", "tools", "resources"]


class GetInfoTool(Tool):
    """Report server information and API configuration flags."""

    @property
    def name(self) -> str:
        return "get_info"

    @property
    def title(self) -> str:
        return "Get Information"

    @property
    def description(self) -> str:
        return "Returns information about MCP server and API configuration"

    async def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        config = context.config
        return ToolOutput.ok(
            {
                "serverName": config.server_name,
                "version": __version__,
                "status": "active",
                "features": list(FEATURES),
                "apiConfig": {
                    "baseUrl": config.base_url,
                    "baseUrlConfigured": config.base_url_configured,
                    "hasApiKey": bool(config.api_key),
                    "hasAuthTokenFromEnv": bool(config.auth_token),
                    "hasAuthTokenInMemory": context.client.get_auth_token() is not None,
                },
            },
            "Information about MCP server and API configuration",
        )


class HelloWidgetTool(Tool):
    """
    Display a greeting in the widget.

    Arguments:
        name (str): Name for the greeting (required)
    """

    @property
    def name(self) -> str:
        return "hello_widget"

    @property
    def title(self) -> str:
        return "Show Greeting"

    @property
    def description(self) -> str:
        return "Displays an interactive greeting widget"

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        name = args.get("name")
        if not isinstance(name, str) or not name.strip():
            return ["'name' is required"]
        return []

    async def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        name = args["name"]
        return ToolOutput.ok(
            {
                "message": f"Hello, {name}! This works through MCP server.",
                "timestamp": utc_timestamp(),
            },
            f"Displayed greeting for {name}",
            serverVersion=__version__,
            renderedAt=utc_timestamp(),
        )
