"""Per-server command groups.

Each registered server becomes a command group named after it, with one
command per stored tool:

    mcpli knuspr                                  # Server help
    mcpli knuspr search_products '{"query": "milk"}'

Tool results are printed on stdout exactly as the server sent them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from mcpli.commands._errors import handle_errors
from mcpli.config import ServerEntry, ToolEntry
from mcpli.container import get_server_service
from mcpli.formatters import render_server_help, truncate_description

console = Console()


def _make_tool_command(server_name: str, tool_name: str) -> Callable[..., None]:
    def run_tool(
        arguments: Annotated[
            str | None,
            typer.Argument(
                metavar="[JSON-ARGUMENTS]",
                help="Tool arguments as a JSON object",
                show_default=False,
            ),
        ] = None,
    ) -> None:
        service = get_server_service()
        with handle_errors():
            result = service.call_tool(server_name, tool_name, arguments)

        print(result)

    return run_tool


def _register_tool(app: typer.Typer, server_name: str, tool: ToolEntry) -> None:
    # Descriptions come from remote servers and are shown literally
    app.command(
        name=tool.name,
        help=escape(tool.description) or None,
        short_help=escape(truncate_description(tool.description)) or None,
    )(_make_tool_command(server_name, tool.name))


def build_server_app(name: str, entry: ServerEntry) -> typer.Typer:
    """Build the command group for one registered server.

    Args:
        name: Registered server name, used as the group name
        entry: Stored server entry providing the tool commands

    Returns:
        Typer app to mount on the root command
    """
    app = typer.Typer(name=name, invoke_without_command=True)

    @app.callback(
        help=(
            f"Invoke tools on the {name} server\n\n"
            f"Server: {escape(entry.server_info.name)}\n\n"
            f"URL: {escape(entry.url)}"
        )
    )
    def show_server(ctx: typer.Context) -> None:
        if ctx.invoked_subcommand is None:
            render_server_help(console, name, entry)

    for tool in entry.tools:
        _register_tool(app, name, tool)

    return app
