"""
apirelay - MCP tool server that relays agent tool calls to an external HTTP API.

apirelay sits between an agent speaking MCP and a plain REST service.
It provides:
- Generic read/create/replace/update/delete tools against one base URL
- A login tool that captures a bearer token for later calls
- A uniform success/error envelope for every tool result
- A small presentation widget for UI surfaces

Example usage:
    $ apirelay serve
    $ apirelay call api_get --args '{"endpoint": "/users/1"}'
    $ apirelay doctor
"""

__version__ = "0.1.0"
__author__ = "apirelay Contributors"

__all__ = [
    "__version__",
    "__author__",
]
