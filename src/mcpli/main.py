"""Main CLI entry point for mcpli."""

from __future__ import annotations

import sys
from typing import Annotated

import structlog
import typer
from rich.console import Console

from mcpli import __version__
from mcpli.commands import build_server_app, register_commands
from mcpli.config import ConfigError, McpliConfig
from mcpli.container import get_server_service, get_settings
from mcpli.logging_setup import configure_logging

logger = structlog.get_logger(__name__)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"mcpli version {__version__}")
        raise typer.Exit(0)


def build_app(config: McpliConfig) -> typer.Typer:
    """Build the command tree for ``config``.

    The built-in registry commands are always present; every registered
    server adds a command group with one command per stored tool.

    Args:
        config: Loaded server registry

    Returns:
        Root Typer app
    """
    app = typer.Typer(
        name="mcpli",
        help="MCP CLI - invoke MCP server tools from the command line",
        no_args_is_help=True,
        add_completion=False,
        rich_markup_mode="rich",
    )

    @app.callback()
    def main(
        version: Annotated[
            bool | None,
            typer.Option(
                "--version",
                "-v",
                help="Show version and exit",
                callback=version_callback,
                is_eager=True,
            ),
        ] = None,
    ) -> None:
        """
        mcpli - command line interface for MCP (Model Context Protocol) servers.

        Add servers with 'mcpli add', then invoke their tools directly:
        mcpli <server> <tool> <json-arguments>
        """
        pass

    register_commands(app)

    for name, entry in config.servers.items():
        app.add_typer(build_server_app(name, entry), name=name)

    return app


def load_config() -> McpliConfig:
    """Load the registry, falling back to an empty one when it is unreadable.

    The built-in commands stay usable even when the file is broken.
    """
    try:
        return get_server_service().config
    except ConfigError as e:
        logger.warning("Config could not be loaded, skipping server commands", error=str(e))
        return McpliConfig()


def cli_main() -> None:
    """Entry point for the CLI."""
    try:
        configure_logging(get_settings().log_level)
        app = build_app(load_config())
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
