"""Server registry commands.

This module provides the built-in commands:
- add: Register a server and fetch its tools
- update: Refresh a server's identity and tools
- remove: Unregister a server
- list: List servers, or the tools of one server

All commands use the service layer and never talk to the protocol client
directly.
"""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from mcpli.commands._errors import handle_errors
from mcpli.container import get_server_service
from mcpli.formatters import format_success, render_server_help, render_server_list

console = Console()


def add(
    name: Annotated[str, typer.Argument(help="Name to register the server under")],
    url: Annotated[str, typer.Argument(help="MCP endpoint URL")],
    header: Annotated[
        list[str] | None,
        typer.Option(
            "--header",
            "-H",
            help="HTTP header in 'key: value' format (can be repeated)",
        ),
    ] = None,
) -> None:
    """Add a new MCP server and fetch its available tools.

    Headers can include environment variable references using ${VAR_NAME}
    syntax. They are stored as typed and expanded whenever a tool is invoked.

    Examples:
        mcpli add knuspr https://mcp.knuspr.de/mcp/ -H "rhl-email: ${ROHLIK_USERNAME}"
    """
    service = get_server_service()
    with handle_errors():
        console.print(f"Connecting to {escape(url)}...")
        entry = service.add(name, url, header or [])

    console.print(
        f"Connected to {escape(entry.server_info.name)} v{escape(entry.server_info.version)}"
    )
    console.print(f"Found {len(entry.tools)} tools")
    console.print(format_success(f"Server {escape(repr(name))} added successfully"))


def update(
    name: Annotated[str, typer.Argument(help="Registered server name")],
) -> None:
    """Refresh the stored tool definitions of a server.

    Use this when the server has added new tools or changed existing ones.

    Examples:
        mcpli update knuspr
    """
    service = get_server_service()
    with handle_errors():
        url = service.get_server(name).url
        console.print(f"Connecting to {escape(url)}...")
        entry = service.update(name)

    console.print(
        f"Connected to {escape(entry.server_info.name)} v{escape(entry.server_info.version)}"
    )
    console.print(f"Found {len(entry.tools)} tools")
    console.print(format_success(f"Server {escape(repr(name))} updated successfully"))


def remove(
    name: Annotated[str, typer.Argument(help="Registered server name")],
) -> None:
    """Remove a server from the configuration.

    Examples:
        mcpli remove knuspr
    """
    service = get_server_service()
    with handle_errors():
        service.remove(name)

    console.print(format_success(f"Server {escape(repr(name))} removed"))


def list_servers(
    name: Annotated[
        str | None,
        typer.Argument(help="Show the tools of this server instead"),
    ] = None,
) -> None:
    """List configured servers, or the tools of one server.

    Examples:
        mcpli list           # List all servers
        mcpli list knuspr    # List tools of the knuspr server
    """
    service = get_server_service()
    with handle_errors():
        if name is None:
            render_server_list(console, service.list_servers())
            return
        entry = service.get_server(name)

    render_server_help(console, name, entry)


def register_commands(app: typer.Typer) -> None:
    """Attach the built-in registry commands to ``app``."""
    app.command("add")(add)
    app.command("update")(update)
    app.command("remove")(remove)
    app.command("list")(list_servers)
