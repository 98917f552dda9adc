"""Service layer exceptions.

Domain-specific exceptions for server registry and tool invocation errors.
They are independent of transport and protocol errors, which are wrapped in
:class:`OperationError` with the original exception kept as ``cause``.
"""

from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """Base exception for service layer errors.

    Attributes:
        message: Human-readable error message
        details: Additional error context

    Example:
        >>> raise ServiceError("Operation failed", details={"reason": "timeout"})
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(ServiceError):
    """Raised when user input is rejected before contacting a server.

    Example:
        >>> raise ValidationError("invalid header format: 'foo' (expected 'key: value')")
    """

    pass


class ServerNotFoundError(ServiceError):
    """Raised when a server name is not registered.

    Example:
        >>> raise ServerNotFoundError("server 'knuspr' not found")
    """

    pass


class ServerExistsError(ValidationError):
    """Raised when adding a server under a name already in use."""

    pass


class ToolNotFoundError(ServiceError):
    """Raised when a server has no stored tool with the requested name."""

    pass


class OperationError(ServiceError):
    """Raised when an operation against a server fails.

    Example:
        >>> raise OperationError("failed to initialize", details={"error": "timeout"})
    """

    pass
