"""Base exceptions for mcpli.

Every failure raised by the transport, protocol and configuration layers
derives from :class:`McpliError`, so callers can catch the whole family
while still inspecting the concrete type.
"""

from __future__ import annotations


class McpliError(Exception):
    """Base exception for mcpli errors.

    Args:
        message: Human-readable error description
        cause: Original exception that caused this error

    Attributes:
        message: Error message
        cause: Original exception (or None)
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConstructionError(McpliError):
    """Request could not be built before any I/O happened.

    Examples:
        - Malformed endpoint URL
        - Tool arguments that are not valid JSON
        - Parameters that cannot be serialized
    """

    pass
