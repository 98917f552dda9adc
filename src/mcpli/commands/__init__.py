"""CLI commands for mcpli."""

from mcpli.commands.servers import register_commands
from mcpli.commands.tools import build_server_app

__all__ = ["build_server_app", "register_commands"]
