"""
Unit tests for HTTP verb tools.

Tests cover:
- Argument validation
- Success envelopes
- Failure envelopes (status, transport, timeout)
"""

import asyncio
import json

import httpx
import pytest

from apirelay.tools import (
    ApiDeleteTool,
    ApiGetTool,
    ApiPatchTool,
    ApiPostTool,
    ApiPutTool,
)
from apirelay.tools.http import ApiVerbTool


class TestValidation:
    """Tests for verb tool argument validation."""

    def test_endpoint_required(self) -> None:
        """endpoint is required on every verb."""
        for tool in (ApiGetTool(), ApiDeleteTool(), ApiPostTool()):
            assert "'endpoint' is required" in tool.validate_args({})

    def test_endpoint_must_be_string(self) -> None:
        """endpoint must be a string."""
        assert ApiGetTool().validate_args({"endpoint": 5}) == ["'endpoint' must be a string"]

    def test_endpoint_cannot_be_empty(self) -> None:
        """endpoint cannot be blank."""
        assert ApiGetTool().validate_args({"endpoint": "  "}) == ["'endpoint' cannot be empty"]

    def test_params_must_be_object(self) -> None:
        """params, when given, must be an object."""
        assert ApiGetTool().validate_args({"endpoint": "/x", "params": [1]}) == [
            "'params' must be an object"
        ]
        assert ApiGetTool().validate_args({"endpoint": "/x", "params": None}) == []

    @pytest.mark.parametrize("tool_cls", [ApiPostTool, ApiPutTool, ApiPatchTool])
    def test_body_verbs_require_data(self, tool_cls: type) -> None:
        """post/put/patch require a data object."""
        tool = tool_cls()
        assert tool.validate_args({"endpoint": "/x"}) == ["'data' is required"]
        assert tool.validate_args({"endpoint": "/x", "data": "text"}) == ["'data' must be an object"]
        assert tool.validate_args({"endpoint": "/x", "data": {}}) == []

    def test_verb_base_is_abstract(self) -> None:
        """The shared verb base cannot be instantiated without call()."""
        with pytest.raises(TypeError):
            ApiVerbTool()  # type: ignore[abstract]

    def test_names_and_titles(self) -> None:
        """Each tool exposes its name, title and description."""
        tool = ApiGetTool()
        assert tool.name == "api_get"
        assert tool.title == "Get Data from API"
        assert tool.description == "Performs GET request to external API"


class TestApiGetTool:
    """Tests for api_get."""

    @pytest.mark.asyncio
    async def test_success_envelope(self, make_context) -> None:
        """A 200 response becomes a success envelope."""
        context, handler = make_context(lambda r: httpx.Response(200, json={"id": 7}))

        output = await ApiGetTool().execute({"endpoint": "/widgets/7"}, context)

        assert output.success is True
        assert output.content["data"] == {"id": 7}
        assert output.content["status"] == 200
        assert output.content["endpoint"] == "/widgets/7"
        assert output.content["timestamp"].endswith("Z")
        assert output.summary == "Successfully retrieved data from /widgets/7"
        assert output.metadata["responseHeaders"]["content-type"] == "application/json"
        assert str(handler.last.url) == "https://svc.test/widgets/7"

    @pytest.mark.asyncio
    async def test_params_forwarded(self, make_context) -> None:
        """Query params reach the URL, nulls dropped."""
        context, handler = make_context(lambda r: httpx.Response(200, json=[]))

        await ApiGetTool().execute(
            {"endpoint": "/items", "params": {"a": 1, "b": None, "c": "x"}},
            context,
        )

        assert str(handler.last.url) == "https://svc.test/items?a=1&c=x"

    @pytest.mark.asyncio
    async def test_status_failure(self, make_context) -> None:
        """Non-2xx responses become failure envelopes."""
        context, _ = make_context(lambda r: httpx.Response(500, json={"error": "boom"}))

        output = await ApiGetTool().execute({"endpoint": "/x"}, context)

        assert output.success is False
        assert "500" in output.error
        assert '"boom"' in output.error
        assert output.content["endpoint"] == "/x"
        assert output.summary.startswith("Error requesting /x: ")
        assert "errorDetails" in output.metadata

    @pytest.mark.asyncio
    async def test_transport_failure(self, make_context) -> None:
        """Connection failures become failure envelopes."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        context, _ = make_context(refuse)

        output = await ApiGetTool().execute({"endpoint": "/x"}, context)

        assert output.success is False
        assert "connection refused" in output.error

    @pytest.mark.asyncio
    async def test_timeout_failure(self, make_context) -> None:
        """Timeouts become failure envelopes naming the duration."""

        async def hang(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200)

        context, _ = make_context(hang, timeout_ms=50)

        output = await ApiGetTool().execute({"endpoint": "/slow"}, context)

        assert output.success is False
        assert output.error == "Request timeout after 50ms"

    @pytest.mark.asyncio
    async def test_invalid_args_do_not_call(self, make_context) -> None:
        """Invalid arguments fail before any request."""
        context, handler = make_context(lambda r: httpx.Response(200))

        output = await ApiGetTool().execute({"endpoint": ""}, context)

        assert output.success is False
        assert handler.requests == []


class TestBodyTools:
    """Tests for api_post, api_put and api_patch."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("tool_cls", "method", "summary"),
        [
            (ApiPostTool, "POST", "Data successfully sent to /items"),
            (ApiPutTool, "PUT", "Data successfully updated in /items"),
            (ApiPatchTool, "PATCH", "Data successfully patched in /items"),
        ],
    )
    async def test_sends_json_body(self, make_context, tool_cls: type, method: str, summary: str) -> None:
        """The data object is sent as the JSON body."""
        context, handler = make_context(lambda r: httpx.Response(201, json={"id": 1}))

        output = await tool_cls().execute({"endpoint": "/items", "data": {"name": "x"}}, context)

        assert output.success is True
        assert output.content["status"] == 201
        assert output.summary == summary
        assert handler.last.method == method
        assert json.loads(handler.last.content) == {"name": "x"}

    @pytest.mark.asyncio
    async def test_post_failure_summary(self, make_context) -> None:
        """Failures use the verb's wording."""
        context, _ = make_context(lambda r: httpx.Response(400, json={"error": "bad"}))

        output = await ApiPostTool().execute({"endpoint": "/items", "data": {}}, context)

        assert output.success is False
        assert output.summary.startswith("Error sending to /items: ")


class TestApiDeleteTool:
    """Tests for api_delete."""

    @pytest.mark.asyncio
    async def test_success(self, make_context) -> None:
        """A 204 delete succeeds with empty data."""
        context, handler = make_context(lambda r: httpx.Response(204))

        output = await ApiDeleteTool().execute({"endpoint": "/widgets/7"}, context)

        assert output.success is True
        assert output.content["status"] == 204
        assert output.content["data"] == ""
        assert handler.last.method == "DELETE"

    @pytest.mark.asyncio
    async def test_not_found(self, make_context) -> None:
        """A 404 delete fails with status and body in the error."""
        context, _ = make_context(lambda r: httpx.Response(404, json={"error": "not found"}))

        output = await ApiDeleteTool().execute({"endpoint": "/widgets/99"}, context)

        assert output.success is False
        assert "404" in output.error
        assert "not found" in output.error
        assert output.content["endpoint"] == "/widgets/99"
        assert output.summary.startswith("Error deleting from /widgets/99: ")
