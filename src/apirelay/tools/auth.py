"""
Login tool for apirelay.

api_auth POSTs credentials to a login endpoint and, when the response
carries a token, stores it on the shared ApiClient so every later request
sends "Authorization: Bearer <token>".

Token extraction is an ordered list of extractors, each a pure function
from the response payload to an optional token. The first truthy result
wins. The default order is the caller's tokenField (if given), then the
configured token_fields (token, accessToken, access_token). Only the top
level of the payload is examined and names are case-sensitive.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from apirelay.errors import TokenNotFoundError, error_message
from apirelay.tools.base import Tool, ToolContext, ToolOutput, utc_timestamp
from apirelay.tools.http import validate_endpoint, validate_object


TokenExtractor = Callable[[Any], str | None]


def field_extractor(field_name: str) -> TokenExtractor:
    """Build an extractor that reads one top-level field of a JSON object."""

    def extract(payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        value = payload.get(field_name)
        if not value:
            return None
        return value if isinstance(value, str) else str(value)

    extract.__name__ = f"field_extractor[{field_name}]"
    return extract


def candidate_fields(token_field: str | None, token_fields: Sequence[str]) -> list[str]:
    """Ordered field names: the caller's field first, then the configured ones."""
    names: list[str] = []
    for name in ([token_field] if token_field else []) + list(token_fields):
        if name not in names:
            names.append(name)
    return names


def build_extractors(field_names: Iterable[str]) -> list[TokenExtractor]:
    """One field extractor per name, in order."""
    return [field_extractor(name) for name in field_names]


def extract_token(payload: Any, extractors: Iterable[TokenExtractor]) -> str | None:
    """Return the first token any extractor finds, or None."""
    for extractor in extractors:
        token = extractor(payload)
        if token:
            return token
    return None


class ApiAuthTool(Tool):
    """
    Authorize against the upstream API and keep the token.

    Arguments:
        endpoint (str): Login endpoint (e.g., /auth/login)
        credentials (dict): Body POSTed to the endpoint
        tokenField (str): Optional response field holding the token

    Returns:
        On success: {success, message, tokenStored, endpoint, status}
        Token missing: {success, error, endpoint, responseData}
        Call failed: {success, error, endpoint}
    """

    @property
    def name(self) -> str:
        return "api_auth"

    @property
    def title(self) -> str:
        return "Authorize"

    @property
    def description(self) -> str:
        return "Authorizes against the API and stores the authentication token for subsequent requests"

    def validate_args(self, args: dict[str, Any]) -> list[str]:
        errors = validate_endpoint(args) + validate_object(args, "credentials", required=True)
        token_field = args.get("tokenField")
        if token_field is not None and not isinstance(token_field, str):
            errors.append("'tokenField' must be a string")
        return errors

    async def execute(self, args: dict[str, Any], context: ToolContext) -> ToolOutput:
        errors = self.validate_args(args)
        if errors:
            return ToolOutput.fail(
                f"Invalid arguments: {'; '.join(errors)}",
                endpoint=args.get("endpoint"),
            ).with_metadata(timestamp=utc_timestamp())

        endpoint = args["endpoint"]
        fields = candidate_fields(args.get("tokenField"), context.config.token_fields)
        extractors = build_extractors(fields)

        try:
            response = await context.client.post(endpoint, args["credentials"])
        except Exception as e:
            message = error_message(e)
            return ToolOutput.fail(
                message,
                summary=f"Authorization failed: {message}",
                endpoint=endpoint,
            ).with_metadata(errorDetails=str(e), timestamp=utc_timestamp())

        token = extract_token(response.data, extractors)
        if token is None:
            err = TokenNotFoundError(
                endpoint=endpoint,
                response_data=response.data,
                fields=fields,
            )
            return ToolOutput.fail(
                err.message,
                summary=(
                    "Authorization response received but token not found. "
                    "Check tokenField parameter or response structure."
                ),
                endpoint=endpoint,
                responseData=response.data,
            ).with_metadata(timestamp=utc_timestamp())

        context.client.set_auth_token(token)
        return ToolOutput.ok(
            {
                "message": "Authorized successfully",
                "tokenStored": True,
                "endpoint": endpoint,
                "status": response.status,
            },
            "Authorized successfully. Token stored for subsequent requests.",
            timestamp=utc_timestamp(),
        )
