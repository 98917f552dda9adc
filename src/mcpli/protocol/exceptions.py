"""Protocol layer exceptions.

These exceptions are raised by the protocol layer when a JSON-RPC exchange
with an MCP server fails after the HTTP round trip succeeded.
"""

from __future__ import annotations

from typing import Any

from mcpli.exceptions import McpliError


class ProtocolError(McpliError):
    """Server answered with a JSON-RPC error object.

    Raised for handshake and tool enumeration only. Errors returned by
    ``tools/call`` belong to the tool's own result and are passed through.

    Args:
        message: Error message reported by the server
        code: JSON-RPC error code
        data: Additional error data (optional)

    Attributes:
        message: Error message
        code: JSON-RPC error code
        data: Additional error information (or None)
    """

    def __init__(self, message: str, code: int, data: Any = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data

    def __str__(self) -> str:
        return f"server error [{self.code}]: {self.message}"


class DecodeError(McpliError):
    """Response envelope is valid but its payload has the wrong shape.

    Examples:
        - ``initialize`` result without ``serverInfo``
        - ``tools/list`` result where ``tools`` is not an array
    """

    pass


class FramingError(McpliError):
    """No JSON-RPC response could be extracted from the response body.

    Raised when the stream ends (or fails) before a parseable envelope was
    found, or when a single line exceeds the decoder's size bound.
    """

    pass
