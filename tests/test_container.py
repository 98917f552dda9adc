"""Tests for dependency injection container."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest
from pydantic import ValidationError

from mcpli.config import ConfigStore
from mcpli.container import (
    Settings,
    get_server_service,
    get_settings,
    get_store,
    get_transport,
    make_client,
    set_override,
)
from mcpli.protocol.client import McpClient
from mcpli.protocol.models import Endpoint
from mcpli.services.server import ServerService
from mcpli.transport.http import HttpTransport


class TestSettings:
    """Tests for Settings model."""

    def test_default_values(self, monkeypatch, tmp_path: Path) -> None:
        """Test that Settings has correct default values."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        settings = Settings()

        assert settings.config_path == tmp_path / "mcpli" / "config.yaml"
        assert settings.timeout == 30
        assert settings.max_redirects == 10
        assert settings.verify_ssl is True
        assert settings.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch, tmp_path: Path) -> None:
        """Test MCPLI_ variables override defaults."""
        monkeypatch.setenv("MCPLI_CONFIG_PATH", str(tmp_path / "custom.yaml"))
        monkeypatch.setenv("MCPLI_TIMEOUT", "5")
        monkeypatch.setenv("MCPLI_MAX_REDIRECTS", "3")
        monkeypatch.setenv("MCPLI_VERIFY_SSL", "false")
        monkeypatch.setenv("MCPLI_LOG_LEVEL", "debug")

        settings = Settings()

        assert settings.config_path == tmp_path / "custom.yaml"
        assert settings.timeout == 5
        assert settings.max_redirects == 3
        assert settings.verify_ssl is False
        assert settings.log_level == "debug"

    def test_timeout_validation(self) -> None:
        """Test that timeout is validated."""
        Settings(timeout=1)

        with pytest.raises(ValidationError):
            Settings(timeout=0)
        with pytest.raises(ValidationError):
            Settings(timeout=7200)

    def test_max_redirects_validation(self) -> None:
        """Test that the redirect limit is bounded."""
        Settings(max_redirects=0)

        with pytest.raises(ValidationError):
            Settings(max_redirects=-1)


class TestFactories:
    """Tests for container factory functions."""

    def test_get_settings_cached(self) -> None:
        """Test settings are loaded once."""
        assert get_settings() is get_settings()

    def test_settings_override_type_checked(self) -> None:
        """Test a settings override must be a Settings instance."""
        set_override("settings", {"timeout": 1})

        with pytest.raises(TypeError):
            get_settings()

    def test_get_transport_uses_settings(self) -> None:
        """Test the transport is configured from settings."""
        set_override("settings", Settings(timeout=7, max_redirects=2, verify_ssl=False))

        transport = get_transport()

        assert isinstance(transport, HttpTransport)
        assert transport.timeout == 7
        assert transport.verify_ssl is False
        assert transport.redirect_policy.max_redirects == 2
        assert get_transport() is transport

    def test_get_store_uses_config_path(self, tmp_path: Path) -> None:
        """Test the store points at the configured file."""
        set_override("settings", Settings(config_path=tmp_path / "c.yaml"))

        store = get_store()

        assert isinstance(store, ConfigStore)
        assert store.path == tmp_path / "c.yaml"

    def test_make_client_shares_transport(self) -> None:
        """Test clients reuse the cached transport."""
        endpoint = Endpoint(url="https://mcp.example.com/mcp/")

        client = make_client(endpoint)

        assert isinstance(client, McpClient)
        assert client.endpoint is endpoint
        assert client.transport is get_transport()

    def test_get_server_service(self, tmp_path: Path) -> None:
        """Test the service is wired to the store."""
        set_override("settings", Settings(config_path=tmp_path / "c.yaml"))

        service = get_server_service()

        assert isinstance(service, ServerService)
        assert service.store.path == tmp_path / "c.yaml"
        assert get_server_service() is service

    def test_service_override(self) -> None:
        """Test overrides replace the real service."""
        mock_service = Mock()
        set_override("service", mock_service)

        assert get_server_service() is mock_service
