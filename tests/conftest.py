"""
Pytest configuration and fixtures for apirelay tests.

The upstream API is simulated with httpx.MockTransport; RecordingHandler
keeps every request it receives so tests can inspect URLs, headers and
bodies.
"""

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from apirelay.client import ApiClient
from apirelay.schema import RelayConfig
from apirelay.tools import ToolContext


class RecordingHandler:
    """MockTransport handler that records requests and delegates responses."""

    def __init__(self, respond: Callable[[httpx.Request], Any]) -> None:
        self.requests: list[httpx.Request] = []
        self._respond = respond

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        return self._respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def config() -> RelayConfig:
    """Configuration pointing at a fake service."""
    return RelayConfig(base_url="https://svc.test", timeout_ms=1000)


@pytest.fixture
def make_client(config: RelayConfig) -> Callable[..., tuple[ApiClient, RecordingHandler]]:
    """Factory: build a client whose transport answers with `respond`."""

    def factory(
        respond: Callable[[httpx.Request], Any],
        **overrides: Any,
    ) -> tuple[ApiClient, RecordingHandler]:
        handler = RecordingHandler(respond)
        cfg = config.model_copy(update=overrides) if overrides else config
        return ApiClient(cfg, transport=httpx.MockTransport(handler)), handler

    return factory


@pytest.fixture
def make_context(make_client: Callable[..., tuple[ApiClient, RecordingHandler]]):
    """Factory: build a ToolContext around a mocked client."""

    def factory(
        respond: Callable[[httpx.Request], Any],
        **overrides: Any,
    ) -> tuple[ToolContext, RecordingHandler]:
        client, handler = make_client(respond, **overrides)
        return ToolContext(client=client, config=client.config), handler

    return factory
