"""Server service for registering MCP servers and calling their tools.

This service owns the server registry workflow: it validates user input,
expands header placeholders, talks to servers through :class:`McpClient`
and persists results through :class:`ConfigStore`. Nothing is written when
a server operation fails.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timezone

import structlog

from mcpli.config import (
    ConfigStore,
    McpliConfig,
    ServerEntry,
    ServerInfoEntry,
    ToolEntry,
    expand_headers,
)
from mcpli.exceptions import ConstructionError, McpliError
from mcpli.protocol.client import McpClient
from mcpli.protocol.models import Endpoint
from mcpli.services.exceptions import (
    OperationError,
    ServerExistsError,
    ServerNotFoundError,
    ToolNotFoundError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

ClientFactory = Callable[[Endpoint], McpClient]

# Built-in command names cannot be used as server names
RESERVED_NAMES = frozenset({"add", "update", "remove", "list", "help"})


def parse_headers(raw_headers: Iterable[str]) -> dict[str, str]:
    """Parse ``"Key: value"`` strings into a header mapping.

    Raises:
        ValidationError: If an entry has no colon or an empty key
    """
    headers: dict[str, str] = {}
    for raw in raw_headers:
        key, sep, value = raw.partition(":")
        if not sep or not key.strip():
            raise ValidationError(f"invalid header format: {raw!r} (expected 'key: value')")
        headers[key.strip()] = value.strip()
    return headers


class ServerService:
    """Service for server registry and tool operations.

    Args:
        store: Configuration store
        client_factory: Builds an MCP client for an endpoint

    Attributes:
        store: Configuration store
        client_factory: MCP client factory

    Example:
        >>> service = ServerService(ConfigStore(), McpClient)
        >>> entry = service.add("knuspr", "https://mcp.knuspr.de/mcp/")
        >>> service.call_tool("knuspr", "get_cart", None)
    """

    def __init__(self, store: ConfigStore, client_factory: ClientFactory) -> None:
        self.store = store
        self.client_factory = client_factory
        self._config: McpliConfig | None = None

    @property
    def config(self) -> McpliConfig:
        """Configuration snapshot, loaded from the store on first use."""
        if self._config is None:
            self._config = self.store.load()
        return self._config

    def _commit(self, config: McpliConfig) -> None:
        self.store.save(config)
        self._config = config

    def list_servers(self) -> dict[str, ServerEntry]:
        """Return registered servers keyed by name."""
        return dict(self.config.servers)

    def get_server(self, name: str) -> ServerEntry:
        """Return the entry for ``name``.

        Raises:
            ServerNotFoundError: If no server is registered under ``name``
        """
        entry = self.config.servers.get(name)
        if entry is None:
            raise ServerNotFoundError(f"server {name!r} not found")
        return entry

    def add(
        self,
        name: str,
        url: str,
        headers: Iterable[str] | None = None,
    ) -> ServerEntry:
        """Register a new server and fetch its tools.

        Headers are stored unexpanded; the connection uses expanded values.

        Raises:
            ValidationError: If the name, URL or headers are invalid
            ServerExistsError: If the name is already registered
            OperationError: If the server cannot be initialized or listed
        """
        if not name or name.startswith("-") or any(c.isspace() for c in name):
            raise ValidationError(f"invalid server name: {name!r}")
        if name in RESERVED_NAMES:
            raise ValidationError(f"server name {name!r} is reserved for a built-in command")
        if not url.startswith(("http://", "https://")):
            raise ValidationError("URL must start with http:// or https://")
        if name in self.config.servers:
            raise ServerExistsError(
                f"server {name!r} already exists (use 'mcpli update {name}' to refresh)"
            )

        raw_headers = parse_headers(headers or [])
        entry = self._fetch(name, url, raw_headers)
        self._commit(self.config.with_server(name, entry))

        logger.info("Server added", server=name, url=url, tools=len(entry.tools))
        return entry

    def update(self, name: str) -> ServerEntry:
        """Refresh identity and tools of a registered server.

        Raises:
            ServerNotFoundError: If the server is not registered
            OperationError: If the server cannot be initialized or listed
        """
        current = self.get_server(name)
        entry = self._fetch(name, current.url, current.headers)
        self._commit(self.config.with_server(name, entry))

        logger.info("Server updated", server=name, tools=len(entry.tools))
        return entry

    def remove(self, name: str) -> None:
        """Unregister a server.

        Raises:
            ServerNotFoundError: If the server is not registered
        """
        self.get_server(name)
        self._commit(self.config.without_server(name))
        logger.info("Server removed", server=name)

    def call_tool(self, server_name: str, tool_name: str, arguments: str | None) -> str:
        """Invoke a stored tool and return its result as JSON text.

        Raises:
            ServerNotFoundError: If the server is not registered
            ToolNotFoundError: If the server has no such tool
            ValidationError: If ``arguments`` is not valid JSON
            OperationError: If the request fails
        """
        entry = self.get_server(server_name)
        if entry.get_tool(tool_name) is None:
            raise ToolNotFoundError(f"tool {tool_name!r} not found on server {server_name!r}")

        client = self.client_factory(Endpoint(url=entry.url, headers=entry.expanded_headers()))
        try:
            return client.call_tool(tool_name, arguments)
        except ConstructionError as e:
            raise ValidationError(e.message, details={"server": server_name}) from e
        except McpliError as e:
            raise OperationError(
                f"failed to call tool {tool_name!r}: {e}",
                details={"server": server_name, "error_type": type(e).__name__},
            ) from e

    def _fetch(self, name: str, url: str, headers: dict[str, str]) -> ServerEntry:
        """Handshake and enumerate tools, returning a fresh entry."""
        client = self.client_factory(Endpoint(url=url, headers=expand_headers(headers)))

        try:
            info = client.initialize()
        except McpliError as e:
            raise OperationError(
                f"failed to initialize: {e}",
                details={"server": name, "error_type": type(e).__name__},
            ) from e

        try:
            tools = client.list_tools()
        except McpliError as e:
            raise OperationError(
                f"failed to list tools: {e}",
                details={"server": name, "error_type": type(e).__name__},
            ) from e

        return ServerEntry(
            url=url,
            headers=headers,
            protocol_version=info.protocol_version,
            server_info=ServerInfoEntry(
                name=info.server_info.name,
                version=info.server_info.version,
            ),
            tools=[
                ToolEntry(
                    name=tool.name,
                    description=tool.description,
                    input_schema=tool.input_schema,
                )
                for tool in tools
            ],
            updated_at=datetime.now(timezone.utc),
        )
