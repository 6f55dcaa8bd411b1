"""
HTTP client for the upstream API.

ApiClient performs exactly one HTTP round trip per call and either returns
an ApiResponse or raises an ApiError subclass. It never swallows a failure.

Request construction:
    - URL: endpoint joined to base_url (absolute endpoints win), then query
      parameters appended in order, skipping None values
    - Headers, last layer wins: defaults, static key, bearer token, per-call
    - Body: JSON for post/put/patch; none for get/delete

Timeout:
    Every call runs inside its own asyncio.timeout() scope. The scope
    cancels the in-flight request when it expires and is released on both
    the success and failure paths.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import httpx

from apirelay.client.auth import AuthState
from apirelay.errors import (
    ApiDecodeError,
    ApiStatusError,
    ApiTimeoutError,
    ApiTransportError,
)
from apirelay.schema import RelayConfig, default_headers


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResponse:
    """
    Normalized upstream response.

    Attributes:
        data: Parsed JSON when the content type is JSON, else the body text
        status: Numeric HTTP status
        headers: Response headers (lower-case names)
    """

    data: Any
    status: int
    headers: dict[str, str] = field(default_factory=dict)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"))
    return str(value)


class ApiClient:
    """
    Client for one upstream API identity.

    The client owns its configuration and a single AuthState. Verb methods
    are coroutines; each opens its own connection and timeout scope, so
    concurrent calls never interfere except through the shared token.

    Usage:
        client = ApiClient(RelayConfig(base_url="https://svc.test"))
        response = await client.get("/widgets/7")
        print(response.status, response.data)

    Attributes:
        config: The immutable RelayConfig
        auth: The AuthState holding the current bearer token
    """

    def __init__(
        self,
        config: RelayConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Upstream API settings
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.config = config
        self.auth = AuthState(config.auth_token)
        self._transport = transport

    # -------------------------------------------------------------------------
    # Authentication state
    # -------------------------------------------------------------------------

    def set_auth_token(self, token: str | None) -> None:
        """Store a bearer token for later requests, or clear it with None."""
        self.auth.set(token)
        logger.info("Auth token %s", "stored" if self.auth.is_authenticated else "cleared")

    def get_auth_token(self) -> str | None:
        """Return the current bearer token, or None."""
        return self.auth.token

    # -------------------------------------------------------------------------
    # Verbs
    # -------------------------------------------------------------------------

    async def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """Perform a GET request."""
        return await self.request("GET", endpoint, params=params, headers=headers)

    async def post(
        self,
        endpoint: str,
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """Perform a POST request with a JSON body."""
        return await self.request("POST", endpoint, body=body, headers=headers)

    async def put(
        self,
        endpoint: str,
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """Perform a PUT request with a JSON body."""
        return await self.request("PUT", endpoint, body=body, headers=headers)

    async def patch(
        self,
        endpoint: str,
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """Perform a PATCH request with a JSON body."""
        return await self.request("PATCH", endpoint, body=body, headers=headers)

    async def delete(
        self,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """Perform a DELETE request."""
        return await self.request("DELETE", endpoint, headers=headers)

    # -------------------------------------------------------------------------
    # Request construction
    # -------------------------------------------------------------------------

    def build_url(self, endpoint: str, params: Mapping[str, Any] | None = None) -> str:
        """
        Resolve an endpoint against the base URL and append query parameters.

        Args:
            endpoint: Relative path or absolute URL
            params: Query parameters; None values are skipped

        Returns:
            The absolute request URL
        """
        url = httpx.URL(self.config.base_url).join(endpoint)
        for key, value in (params or {}).items():
            if value is None:
                continue
            url = url.copy_add_param(str(key), _stringify(value))
        return str(url)

    def build_headers(self, extra: Mapping[str, str] | None = None) -> httpx.Headers:
        """
        Merge request headers; later layers replace earlier ones.

        Order: built-in headers, configured headers, static key, bearer token,
        per-call headers.
        Names are compared case-insensitively.
        """
        headers = httpx.Headers(default_headers())
        headers.update(self.config.headers)
        if self.config.api_key:
            headers.update({self.config.api_key_header: self.config.api_key})
        headers.update(self.auth.header())
        if extra:
            headers.update(dict(extra))
        return headers

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiResponse:
        """
        Execute one HTTP request under the configured timeout.

        Raises:
            ApiTimeoutError: The call did not finish within timeout_ms
            ApiTransportError: The request could not be sent or answered
            ApiDecodeError: A JSON content type carried invalid JSON
            ApiStatusError: The response status was not 2xx
        """
        method = method.upper()
        url = self.build_url(endpoint, params)
        merged = self.build_headers(headers)
        content = None if body is None else json.dumps(body).encode("utf-8")

        t0 = time.perf_counter()
        logger.debug("HTTP %s %s", method, url)

        try:
            async with asyncio.timeout(self.config.timeout_seconds):
                async with httpx.AsyncClient(
                    transport=self._transport,
                    timeout=None,
                    follow_redirects=True,
                ) as client:
                    response = await client.request(method, url, content=content, headers=merged)
        except (TimeoutError, httpx.TimeoutException) as e:
            self._log_failure(method, url, t0, None, "timeout")
            raise ApiTimeoutError(method=method, url=url, timeout_ms=self.config.timeout_ms) from e
        except httpx.RequestError as e:
            self._log_failure(method, url, t0, None, str(e))
            raise ApiTransportError(
                method=method,
                url=url,
                underlying_error=str(e) or type(e).__name__,
            ) from e

        data = self._decode(response, method, url)

        if not response.is_success:
            self._log_failure(method, url, t0, response.status_code, response.reason_phrase)
            raise ApiStatusError(
                method=method,
                url=url,
                status=response.status_code,
                reason=response.reason_phrase,
                body=data,
            )

        logger.debug(
            "HTTP %s %s -> %s (%sms)",
            method,
            url,
            response.status_code,
            int((time.perf_counter() - t0) * 1000),
        )
        return ApiResponse(
            data=data,
            status=response.status_code,
            headers=dict(response.headers),
        )

    @staticmethod
    def _decode(response: httpx.Response, method: str, url: str) -> Any:
        """Parse JSON bodies by content type; return text otherwise."""
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return response.text
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiDecodeError(method=method, url=url, underlying_error=str(e)) from e

    @staticmethod
    def _log_failure(method: str, url: str, t0: float, status: int | None, detail: str) -> None:
        logger.warning(
            "HTTP %s %s failed (status=%s, ms=%s): %s",
            method,
            url,
            status,
            int((time.perf_counter() - t0) * 1000),
            detail,
        )

    def __repr__(self) -> str:
        return f"<ApiClient: {self.config.base_url} {self.auth!r}>"


def create_api_client(
    config: RelayConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ApiClient:
    """Create the shared client for a server process."""
    return ApiClient(config, transport=transport)
