"""Output formatters for mcpli.

Human-oriented output goes through a rich Console, which takes care of
terminal width and wrapping. Tool results are relayed as received and
written with ``print()`` so they can be piped into other programs.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.padding import Padding
from rich.table import Table
from rich.text import Text

from mcpli.config import ServerEntry

DESCRIPTION_INDENT = 6


def truncate_description(text: str, max_len: int = 60) -> str:
    """Shorten a description to ``max_len`` characters for one-line help."""
    text = " ".join(text.split())
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def render_server_list(console: Console, servers: dict[str, ServerEntry]) -> None:
    """Print a table of registered servers."""
    if not servers:
        console.print("[yellow]No servers configured. Use 'mcpli add' to add one.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Tools", justify="right")
    table.add_column("Updated")

    for name, entry in servers.items():
        updated = entry.updated_at.strftime("%Y-%m-%d %H:%M") if entry.updated_at else "-"
        table.add_row(escape(name), escape(entry.url), str(len(entry.tools)), updated)

    console.print(table)


def render_server_help(console: Console, name: str, entry: ServerEntry) -> None:
    """Print a server's identity and its tools with wrapped descriptions."""
    console.print(f"[bold]Server:[/bold] {escape(entry.server_info.name)}")
    console.print(f"[bold]URL:[/bold] {escape(entry.url)}")
    console.print()

    if not entry.tools:
        console.print("No tools available")
        return

    console.print("[bold]Tools:[/bold]")
    for tool in entry.tools:
        console.print(Text(f"  {tool.name}"))
        if tool.description:
            description = Text(" ".join(tool.description.split()))
            console.print(Padding(description, (0, 0, 0, DESCRIPTION_INDENT)))
        console.print()

    console.print(Text(f'Use "mcpli {name} <tool> --help" for more information about a tool.'))


def format_success(message: str) -> str:
    """Format a success message."""
    return f"[green]✓[/green] {message}"
