"""Transport layer exceptions.

These exceptions are raised by the transport layer when network-level
errors occur. They have no knowledge of JSON-RPC or MCP.
"""

from __future__ import annotations

from mcpli.exceptions import McpliError


class TransportError(McpliError):
    """Base exception for transport layer errors.

    Raised when network-level communication fails. This is the base class
    for all transport-specific errors.

    Args:
        message: Human-readable error description
        status_code: HTTP status code if applicable
        cause: Original exception that caused this error

    Attributes:
        message: Error message
        status_code: HTTP status code (or None)
        cause: Original exception (or None)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.status_code = status_code

    def __str__(self) -> str:
        """Return string representation of error.

        Returns:
            Formatted error message with status code if present
        """
        if self.status_code:
            return f"{self.message} (status: {self.status_code})"
        return self.message


class NetworkError(TransportError):
    """Network-level error occurred.

    Examples:
        - Connection refused
        - DNS lookup failed
        - Network unreachable
    """

    pass


class TimeoutError(TransportError):
    """Request timed out.

    Raised when connecting or reading exceeds the request deadline. This is
    distinct from network errors as the server may be reachable but slow.
    """

    pass


class HttpError(TransportError):
    """Server answered with a non-2xx status code.

    Attributes:
        body: Response body text, kept for diagnostics
    """

    def __init__(self, message: str, status_code: int, body: str = "") -> None:
        super().__init__(message, status_code=status_code)
        self.body = body


class TooManyRedirectsError(TransportError):
    """Redirect chain exceeded the configured maximum number of hops."""

    def __init__(self, max_redirects: int, location: str | None = None) -> None:
        super().__init__(f"too many redirects (limit {max_redirects})")
        self.max_redirects = max_redirects
        self.location = location
