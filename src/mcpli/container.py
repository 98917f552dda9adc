"""Dependency injection container for mcpli.

Factory functions:
- get_settings(): Load and cache settings from the environment
- get_transport(): Create and cache the HTTP transport
- get_store(): Create the configuration store
- get_server_service(): Create and cache the server service

Every factory honours overrides registered with :func:`set_override`, so
tests can inject mocks without touching the wiring.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mcpli.config import ConfigStore, default_config_path
from mcpli.protocol.client import McpClient
from mcpli.protocol.models import Endpoint
from mcpli.services.server import ServerService
from mcpli.transport.http import HttpTransport


class Settings(BaseSettings):
    """mcpli runtime settings.

    Environment variables:
    - MCPLI_CONFIG_PATH: Server registry file
    - MCPLI_TIMEOUT: Request timeout in seconds
    - MCPLI_MAX_REDIRECTS: Redirect hops followed per request
    - MCPLI_VERIFY_SSL: Whether to verify SSL (true/false)
    - MCPLI_LOG_LEVEL: Log level for stderr diagnostics

    Example:
        >>> settings = Settings()
        >>> settings.timeout
        30.0
    """

    config_path: Path = Field(default_factory=default_config_path)
    timeout: float = Field(default=30.0, gt=0, le=3600)
    max_redirects: int = Field(default=10, ge=0, le=50)
    verify_ssl: bool = Field(default=True)
    log_level: str = Field(default="WARNING")

    model_config = SettingsConfigDict(
        env_prefix="MCPLI_",
        case_sensitive=False,
    )


# Global container state for testing/mocking
_overrides: dict[str, Any] = {}


def set_override(key: str, value: Any) -> None:
    """Override a container dependency for testing.

    Args:
        key: Dependency key ("settings", "transport", "store", "service")
        value: Mock or test implementation

    Example:
        >>> set_override("service", mock_service)
        >>> service = get_server_service()  # Returns mock
        >>> clear_overrides()
    """
    _overrides[key] = value
    _clear_caches()


def clear_overrides() -> None:
    """Clear all dependency overrides and cached instances."""
    _overrides.clear()
    _clear_caches()


def _clear_caches() -> None:
    get_settings.cache_clear()
    get_transport.cache_clear()
    get_server_service.cache_clear()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings."""
    if "settings" in _overrides:
        override = _overrides["settings"]
        if not isinstance(override, Settings):
            raise TypeError("Override for 'settings' must be a Settings instance")
        return override

    return Settings()


@lru_cache(maxsize=1)
def get_transport() -> HttpTransport:
    """Create and cache the HTTP transport shared by all clients."""
    if "transport" in _overrides:
        return _overrides["transport"]

    settings = get_settings()
    return HttpTransport(
        timeout=settings.timeout,
        verify_ssl=settings.verify_ssl,
        max_redirects=settings.max_redirects,
    )


def get_store() -> ConfigStore:
    """Create the configuration store at the configured path."""
    if "store" in _overrides:
        return _overrides["store"]

    return ConfigStore(get_settings().config_path)


def make_client(endpoint: Endpoint) -> McpClient:
    """Build an MCP client for ``endpoint`` on the shared transport."""
    return McpClient(endpoint, transport=get_transport())


@lru_cache(maxsize=1)
def get_server_service() -> ServerService:
    """Create and cache the server service.

    Cached so the registry is loaded once per process.
    """
    if "service" in _overrides:
        return _overrides["service"]

    return ServerService(get_store(), make_client)
