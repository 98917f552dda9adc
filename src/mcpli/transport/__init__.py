"""Transport layer for mcpli.

This module handles HTTP communication with no knowledge of JSON-RPC or MCP.
It is responsible for:
- HTTP POST requests with streamed responses
- Connection pooling
- Method, body and header preserving redirects
- SSL/TLS verification
- Network error translation
"""

from mcpli.transport.exceptions import (
    HttpError,
    NetworkError,
    TimeoutError,
    TooManyRedirectsError,
    TransportError,
)
from mcpli.transport.http import HttpTransport
from mcpli.transport.redirect import RedirectPolicy

__all__ = [
    "HttpTransport",
    "RedirectPolicy",
    "TransportError",
    "NetworkError",
    "TimeoutError",
    "HttpError",
    "TooManyRedirectsError",
]
