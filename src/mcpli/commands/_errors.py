"""Shared error reporting for mcpli commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console
from rich.markup import escape

from mcpli.exceptions import McpliError
from mcpli.services.exceptions import OperationError, ServiceError, ValidationError

console = Console(stderr=True)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn service and core failures into a message and an exit code.

    Validation errors exit with 2, every other failure with 1.
    """
    try:
        yield
    except ValidationError as e:
        console.print(f"[red]Validation error:[/red] {escape(e.message)}")
        raise typer.Exit(2)
    except OperationError as e:
        console.print(f"[red]Operation failed:[/red] {escape(e.message)}")
        if e.details:
            console.print(f"[dim]Details: {escape(str(e.details))}[/dim]")
        raise typer.Exit(1)
    except ServiceError as e:
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        raise typer.Exit(1)
    except McpliError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
