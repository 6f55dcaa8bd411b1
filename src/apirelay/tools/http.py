"""
HTTP verb tools for apirelay.

This module provides one tool per upstream verb:
- api_get: Read data (GET, optional query params)
- api_post: Create data (POST, JSON body)
- api_put: Replace data (PUT, JSON body)
- api_patch: Partially update data (PATCH, JSON body)
- api_delete: Delete data (DELETE)

Each tool makes exactly one ApiClient call and folds the outcome into the
envelope:
    success: {success, data, status, endpoint, timestamp}
    failure: {success, error, endpoint, timestamp}
"""

from abc import abstractmethod
from typing import Any

from apirelay.client import ApiResponse
from apirelay.errors import error_message
from apirelay.tools.base import Tool, ToolContext, ToolOutput, utc_timestamp


def validate_endpoint(args: dict[str, Any]) -> list[str]:
    """Validate the shared 'endpoint' argument."""
    if "endpoint" not in args:
        return ["'endpoint' is required"]
    if not isinstance(args["endpoint"], str):
        return ["'endpoint' must be a string"]
    if not args["endpoint"].strip():
        return ["'endpoint' cannot be empty"]
    return []


def validate_object(args: dict[str, Any], key: str, *, required: bool) -> list[str]:
    """Validate that args[key] is a JSON object when present (or required)."""
    if key not in args or args[key] is None:
        return [f"'{key}' is required"] if required else []
    if not isinstance(args[key], dict):
        return [f"'{key}' must be an object"]
    return []


class ApiVerbTool(Tool):
    """
    Shared behavior of the verb tools.

    Subclasses set the class attributes and implement call().

    Attributes:
        tool_name: Registered tool name
        tool_title: Display title
        tool_description: Description shown to agents
        success_text: Summary template on success ({endpoint})
        failure_text: Summary template on failure ({endpoint}, {error})
    """

    tool_name = ""
    tool_title = ""
    tool_description = ""
    success_text = "Request to {endpoint} succeeded"
    failure_text = "Error requesting {endpoint}: {error}"

    @property
    def name(self) -> str:
        return self.tool_name

    @property
    def title(self) -> str:
        return self.tool_title or self.tool_name

    @property
    def description(self) -> str:
        return self.tool_description

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        return validate_endpoint(args)

    @abstractmethod
    async def call(self, args: dict[str, Any], context: ToolContext) -> ApiResponse:
        """Make the ApiClient call for this verb."""
        ...

    async def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        errors = self.validate_args(args)
        if errors:
            return ToolOutput.fail(
                f"Invalid arguments: {'; '.join(errors)}",
                endpoint=args.get("endpoint"),
                timestamp=utc_timestamp(),
            )

        endpoint = args["endpoint"]
        try:
            response = await self.call(args, context)
        except Exception as e:
            message = error_message(e)
            return ToolOutput.fail(
                message,
                summary=self.failure_text.format(endpoint=endpoint, error=message),
                endpoint=endpoint,
                timestamp=utc_timestamp(),
            ).with_metadata(errorDetails=str(e))

        return ToolOutput.ok(
            {
                "data": response.data,
                "status": response.status,
                "endpoint": endpoint,
                "timestamp": utc_timestamp(),
            },
            self.success_text.format(endpoint=endpoint),
            responseHeaders=response.headers,
        )


class ApiGetTool(ApiVerbTool):
    """
    Read data from the upstream API.

    Arguments:
        endpoint (str): Path relative to the base URL, or an absolute URL
        params (dict): Optional query parameters; null values are skipped
    """

    tool_name = "api_get"
    tool_title = "Get Data from API"
    tool_description = "Performs GET request to external API"
    success_text = "Successfully retrieved data from {endpoint}"
    failure_text = "Error requesting {endpoint}: {error}"

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        return validate_endpoint(args) + validate_object(args, "params", required=False)

    async def call(self, args: dict[str, Any], context: ToolContext) -> ApiResponse:
        return await context.client.get(args["endpoint"], args.get("params"))


class ApiBodyTool(ApiVerbTool):
    """Verb tools that send a required JSON object in 'data'."""

    method = ""

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        return validate_endpoint(args) + validate_object(args, "data", required=True)

    async def call(self, args: dict[str, Any], context: ToolContext) -> ApiResponse:
        verb = getattr(context.client, self.method)
        return await verb(args["endpoint"], args["data"])


class ApiPostTool(ApiBodyTool):
    """Create data in the upstream API."""

    method = "post"
    tool_name = "api_post"
    tool_title = "Send Data to API"
    tool_description = "Performs POST request to external API"
    success_text = "Data successfully sent to {endpoint}"
    failure_text = "Error sending to {endpoint}: {error}"


class ApiPutTool(ApiBodyTool):
    """Replace data in the upstream API."""

    method = "put"
    tool_name = "api_put"
    tool_title = "Update Data in API"
    tool_description = "Performs PUT request to update data"
    success_text = "Data successfully updated in {endpoint}"
    failure_text = "Error updating {endpoint}: {error}"


class ApiPatchTool(ApiBodyTool):
    """Partially update data in the upstream API."""

    method = "patch"
    tool_name = "api_patch"
    tool_title = "Patch Data in API"
    tool_description = "Performs PATCH request to partially update data"
    success_text = "Data successfully patched in {endpoint}"
    failure_text = "Error patching {endpoint}: {error}"


class ApiDeleteTool(ApiVerbTool):
    """Delete data from the upstream API."""

    tool_name = "api_delete"
    tool_title = "Delete Data from API"
    tool_description = "Performs DELETE request to delete data"
    success_text = "Data successfully deleted from {endpoint}"
    failure_text = "Error deleting from {endpoint}: {error}"

    async def call(self, args: dict[str, Any], context: ToolContext) -> ApiResponse:
        return await context.client.delete(args["endpoint"])


HTTP_TOOLS: tuple[type[ApiVerbTool], ...] = (
    ApiGetTool,
    ApiPostTool,
    ApiPutTool,
    ApiPatchTool,
    ApiDeleteTool,
)
