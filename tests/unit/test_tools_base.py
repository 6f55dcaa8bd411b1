"""
Unit tests for tool base classes and the registry.

Tests cover:
- ToolOutput envelope construction
- ToolRegistry registration and lookup
- dispatch() validation and failure folding
- Argument redaction for logs
"""

import logging
from typing import Any

import pytest

from apirelay.client import ApiClient
from apirelay.errors import ToolNotFoundError
from apirelay.schema import RelayConfig
from apirelay.tools import Tool, ToolContext, ToolOutput, ToolRegistry, build_registry
from apirelay.tools.base import utc_timestamp
from apirelay.tools.registry import sanitize_args_for_log


class EchoTool(Tool):
    """Returns its message argument."""

    @property
    def name(self) -> str:
        return "echo"

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        if not isinstance(args.get("message"), str):
            return ["'message' is required"]
        return []

    async def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        return ToolOutput.ok({"message": args["message"]}, "Echoed")


class ExplodingTool(Tool):
    """Raises instead of returning an envelope."""

    @property
    def name(self) -> str:
        return "explode"

    async def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        raise RuntimeError("kaboom")


@pytest.fixture
def context() -> ToolContext:
    config = RelayConfig(base_url="https://svc.test")
    return ToolContext(client=ApiClient(config), config=config)


# =============================================================================
# ToolOutput Tests
# =============================================================================


class TestToolOutput:
    """Tests for the result envelope."""

    def test_ok(self) -> None:
        """Successful outputs carry content, summary and metadata."""
        output = ToolOutput.ok({"data": 1}, "Done", responseHeaders={"a": "b"})
        assert output.success is True
        assert output.summary == "Done"
        assert output.metadata == {"responseHeaders": {"a": "b"}}
        assert output.error is None

    def test_fail(self) -> None:
        """Failed outputs carry the error and extra fields."""
        output = ToolOutput.fail("boom", endpoint="/x")
        assert output.success is False
        assert output.error == "boom"
        assert output.summary == "boom"
        assert output.content == {"error": "boom", "endpoint": "/x"}

    def test_fail_custom_summary(self) -> None:
        """A summary can differ from the error."""
        assert ToolOutput.fail("boom", summary="It broke").summary == "It broke"

    def test_structured_always_has_success(self) -> None:
        """The structured form leads with success."""
        assert ToolOutput.ok({"a": 1}, "s").structured == {"success": True, "a": 1}
        assert ToolOutput.fail("e").structured == {"success": False, "error": "e"}

    def test_with_metadata(self) -> None:
        """Metadata merges into a new envelope."""
        original = ToolOutput.ok({}, "s", a=1)
        updated = original.with_metadata(b=2)
        assert updated.metadata == {"a": 1, "b": 2}
        assert original.metadata == {"a": 1}

    def test_utc_timestamp_format(self) -> None:
        """Timestamps are ISO-8601 UTC with a Z suffix."""
        ts = utc_timestamp()
        assert ts.endswith("Z")
        assert "T" in ts
        assert "+00:00" not in ts


# =============================================================================
# ToolRegistry Tests
# =============================================================================


class TestToolRegistry:
    """Tests for registration and lookup."""

    def test_register_and_get(self) -> None:
        """Registered tools are found by name."""
        registry = ToolRegistry()
        tool = EchoTool()
        registry.register(tool)
        assert registry.get("echo") is tool
        assert "echo" in registry
        assert registry.has("echo")
        assert len(registry) == 1

    def test_get_unknown_raises(self) -> None:
        """Unknown names raise ToolNotFoundError."""
        with pytest.raises(ToolNotFoundError) as exc_info:
            ToolRegistry().get("nope")
        assert exc_info.value.tool == "nope"

    def test_get_optional(self) -> None:
        """get_optional returns None for unknown names."""
        assert ToolRegistry().get_optional("nope") is None

    def test_register_none_rejected(self) -> None:
        """None is not a tool."""
        with pytest.raises(ValueError):
            ToolRegistry().register(None)  # type: ignore[arg-type]

    def test_unregister(self) -> None:
        """Tools can be removed."""
        registry = ToolRegistry()
        registry.register(EchoTool())
        assert registry.unregister("echo") is True
        assert registry.unregister("echo") is False
        assert len(registry) == 0

    def test_list_sorted(self) -> None:
        """Names are listed in sorted order."""
        registry = ToolRegistry()
        registry.register(ExplodingTool())
        registry.register(EchoTool())
        assert registry.list_tools() == ["echo", "explode"]

    def test_build_registry(self) -> None:
        """The default registry holds every built-in tool."""
        assert build_registry().list_tools() == [
            "api_auth",
            "api_delete",
            "api_get",
            "api_patch",
            "api_post",
            "api_put",
            "get_info",
            "hello_widget",
        ]


class TestDispatch:
    """Tests for ToolRegistry.dispatch()."""

    @pytest.mark.asyncio
    async def test_success(self, context: ToolContext) -> None:
        """Valid calls return the tool's envelope."""
        registry = ToolRegistry()
        registry.register(EchoTool())
        output = await registry.dispatch("echo", {"message": "hi"}, context)
        assert output.success is True
        assert output.content == {"message": "hi"}

    @pytest.mark.asyncio
    async def test_unknown_tool_raises(self, context: ToolContext) -> None:
        """Unknown tools are a protocol-level error, not an envelope."""
        with pytest.raises(ToolNotFoundError):
            await ToolRegistry().dispatch("nope", {}, context)

    @pytest.mark.asyncio
    async def test_invalid_args_become_failure(self, context: ToolContext) -> None:
        """Validation errors become a failure envelope."""
        registry = ToolRegistry()
        registry.register(EchoTool())
        output = await registry.dispatch("echo", {}, context)
        assert output.success is False
        assert output.error == "Invalid arguments for echo: 'message' is required"
        assert "timestamp" in output.content

    @pytest.mark.asyncio
    async def test_raising_tool_becomes_failure(self, context: ToolContext) -> None:
        """Exceptions escaping a tool are folded into an envelope."""
        registry = ToolRegistry()
        registry.register(ExplodingTool())
        output = await registry.dispatch("explode", {"endpoint": "/x"}, context)
        assert output.success is False
        assert output.error == "kaboom"
        assert output.content["endpoint"] == "/x"
        assert "RuntimeError" in output.metadata["errorDetails"]

    @pytest.mark.asyncio
    async def test_none_args(self, context: ToolContext) -> None:
        """None arguments are treated as empty."""
        output = await build_registry().dispatch("get_info", None, context)
        assert output.success is True

    @pytest.mark.asyncio
    async def test_logs_redacted_args(
        self,
        context: ToolContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Dispatch logs never contain credentials."""
        registry = ToolRegistry()
        registry.register(EchoTool())
        with caplog.at_level(logging.INFO, logger="apirelay.tools.registry"):
            await registry.dispatch("echo", {"message": "hi", "password": "hunter2"}, context)
        assert "hunter2" not in caplog.text
        assert "***redacted***" in caplog.text


class TestSanitizeArgs:
    """Tests for sanitize_args_for_log()."""

    def test_redacts_secret_keys(self) -> None:
        """Known secret keys are replaced, case-insensitively."""
        out = sanitize_args_for_log({
            "endpoint": "/login",
            "credentials": {"user": "a", "pass": "b"},
            "Authorization": "Bearer x",
        })
        assert out == {
            "endpoint": "/login",
            "credentials": "***redacted***",
            "Authorization": "***redacted***",
        }

    def test_none(self) -> None:
        """None yields an empty dict."""
        assert sanitize_args_for_log(None) == {}
