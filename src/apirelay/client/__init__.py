"""
Upstream API client for apirelay.

Components:
    - AuthState: In-memory holder of the current bearer token
    - ApiClient: One HTTP round trip per call, with timeout and auth header
    - ApiResponse: Normalized response (data, status, headers)
"""

from apirelay.client.api import ApiClient, ApiResponse, create_api_client
from apirelay.client.auth import AuthState

__all__ = [
    "ApiClient",
    "ApiResponse",
    "AuthState",
    "create_api_client",
]
