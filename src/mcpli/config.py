"""Persistent server registry for mcpli.

Registered servers live in a YAML document keyed by server name::

    servers:
      knuspr:
        url: https://mcp.knuspr.de/mcp/
        headers:
          rhl-email: ${ROHLIK_USERNAME}
        protocol_version: "2024-11-05"
        server_info: {name: knuspr, version: "1.0"}
        tools: [...]
        updated_at: "2025-01-01T12:00:00Z"

Headers are stored as typed by the user; ``${VAR}`` references are only
expanded right before a request is made.
"""

from __future__ import annotations

import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mcpli.exceptions import McpliError

logger = structlog.get_logger(__name__)

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


class ConfigError(McpliError):
    """Configuration file cannot be read, parsed or written."""

    pass


class ToolEntry(BaseModel):
    """Stored tool definition."""

    name: str
    description: str = ""
    input_schema: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True)


class ServerInfoEntry(BaseModel):
    """Stored server identity."""

    name: str = ""
    version: str = ""

    model_config = ConfigDict(frozen=True)


class ServerEntry(BaseModel):
    """Everything mcpli remembers about one registered server."""

    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    protocol_version: str = ""
    server_info: ServerInfoEntry = Field(default_factory=ServerInfoEntry)
    tools: list[ToolEntry] = Field(default_factory=list)
    updated_at: datetime | None = None

    model_config = ConfigDict(frozen=True)

    def get_tool(self, name: str) -> ToolEntry | None:
        """Return the stored tool called ``name``, if any."""
        for tool in self.tools:
            if tool.name == name:
                return tool
        return None

    def expanded_headers(self) -> dict[str, str]:
        """Return a copy of the headers with ``${VAR}`` references expanded."""
        return expand_headers(self.headers)


class McpliConfig(BaseModel):
    """Immutable snapshot of all registered servers.

    Updates return a new snapshot; the loaded value is never mutated.
    """

    servers: dict[str, ServerEntry] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def with_server(self, name: str, entry: ServerEntry) -> McpliConfig:
        """Return a copy with ``name`` added or replaced."""
        servers = dict(self.servers)
        servers[name] = entry
        return McpliConfig(servers=servers)

    def without_server(self, name: str) -> McpliConfig:
        """Return a copy with ``name`` removed."""
        servers = {k: v for k, v in self.servers.items() if k != name}
        return McpliConfig(servers=servers)


def default_config_path() -> Path:
    """Return ``$XDG_CONFIG_HOME/mcpli/config.yaml`` (``~/.config`` fallback)."""
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "mcpli" / "config.yaml"


class ConfigStore:
    """Load and save :class:`McpliConfig` as YAML.

    Args:
        path: Config file location (default: :func:`default_config_path`)

    Example:
        >>> store = ConfigStore(Path("/tmp/mcpli.yaml"))
        >>> config = store.load()
        >>> store.save(config.without_server("old"))
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or default_config_path()

    def load(self) -> McpliConfig:
        """Read the configuration, returning an empty one if the file is missing.

        Raises:
            ConfigError: If the file is unreadable, not YAML, or invalid
        """
        if not self.path.exists():
            return McpliConfig()

        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.path}", cause=e) from e
        except OSError as e:
            raise ConfigError(f"Failed to read {self.path}", cause=e) from e

        if data is None:
            return McpliConfig()
        if not isinstance(data, dict):
            raise ConfigError(f"Invalid configuration in {self.path}: expected a mapping")

        try:
            config = McpliConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.path}", cause=e) from e

        logger.debug("Loaded configuration", path=str(self.path), servers=len(config.servers))
        return config

    def save(self, config: McpliConfig) -> None:
        """Write the configuration, creating parent directories as needed.

        Raises:
            ConfigError: If the file cannot be written
        """
        data = config.model_dump(mode="json")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"Failed to write {self.path}", cause=e) from e

        logger.debug("Saved configuration", path=str(self.path), servers=len(config.servers))


def expand_env(value: str) -> str:
    """Substitute ``${VAR}`` references with environment values.

    References to unset variables are left untouched.

    Example:
        >>> os.environ["TOKEN"] = "abc"
        >>> expand_env("Bearer ${TOKEN} ${MISSING}")
        'Bearer abc ${MISSING}'
    """

    def replace_env(match: re.Match[str]) -> str:
        return os.environ.get(match.group(1), match.group(0))

    return _ENV_VAR_PATTERN.sub(replace_env, value)


def expand_headers(headers: dict[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` with every value passed through :func:`expand_env`."""
    return {key: expand_env(value) for key, value in headers.items()}
