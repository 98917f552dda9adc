"""Tests for output formatters."""

from __future__ import annotations

import io
from datetime import datetime, timezone

from rich.console import Console

from mcpli.config import ServerEntry, ServerInfoEntry, ToolEntry
from mcpli.formatters import (
    format_success,
    render_server_help,
    render_server_list,
    truncate_description,
)


def _console(width: int = 80) -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=width, color_system=None), buffer


def _entry(**overrides) -> ServerEntry:
    fields = {
        "url": "https://mcp.knuspr.de/mcp/",
        "server_info": ServerInfoEntry(name="knuspr", version="1.0"),
        "tools": [
            ToolEntry(
                name="search_products",
                description=(
                    "Search the product catalogue by free text. Returns matching "
                    "products with their prices, availability and unit sizes."
                ),
            ),
            ToolEntry(name="get_cart"),
        ],
        "updated_at": datetime(2025, 3, 4, 5, 6, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return ServerEntry(**fields)


class TestTruncateDescription:
    """Tests for description truncation."""

    def test_short_text_unchanged(self) -> None:
        """Test short descriptions pass through."""
        assert truncate_description("Show the cart") == "Show the cart"

    def test_long_text_truncated(self) -> None:
        """Test long descriptions are cut with an ellipsis."""
        text = "x" * 100

        result = truncate_description(text)

        assert len(result) == 60
        assert result.endswith("...")

    def test_whitespace_collapsed(self) -> None:
        """Test newlines do not leak into one-line help."""
        assert truncate_description("line one\n  line two") == "line one line two"


class TestRenderServerList:
    """Tests for the server table."""

    def test_table(self) -> None:
        """Test each server is a row with its tool count."""
        console, buffer = _console(width=120)

        render_server_list(console, {"knuspr": _entry()})

        output = buffer.getvalue()
        assert "knuspr" in output
        assert "https://mcp.knuspr.de/mcp/" in output
        assert "2025-03-04 05:06" in output
        assert " 2 " in output

    def test_empty(self) -> None:
        """Test the hint shown when nothing is registered."""
        console, buffer = _console()

        render_server_list(console, {})

        assert "No servers configured. Use 'mcpli add' to add one." in buffer.getvalue()

    def test_never_updated(self) -> None:
        """Test servers without a timestamp show a dash."""
        console, buffer = _console(width=120)

        render_server_list(console, {"x": _entry(updated_at=None)})

        assert " - " in buffer.getvalue()


class TestRenderServerHelp:
    """Tests for server help output."""

    def test_layout(self) -> None:
        """Test identity, tool names and the closing hint."""
        console, buffer = _console()

        render_server_help(console, "knuspr", _entry())

        lines = buffer.getvalue().splitlines()
        assert lines[0] == "Server: knuspr"
        assert lines[1] == "URL: https://mcp.knuspr.de/mcp/"
        assert lines[2] == ""
        assert lines[3] == "Tools:"
        assert lines[4] == "  search_products"
        assert lines[-1] == 'Use "mcpli knuspr <tool> --help" for more information about a tool.'
        assert "  get_cart" in lines

    def test_descriptions_wrapped_and_indented(self) -> None:
        """Test long descriptions wrap to the width with a six space indent."""
        console, buffer = _console(width=50)

        render_server_help(console, "knuspr", _entry())

        lines = buffer.getvalue().splitlines()
        start = lines.index("  search_products") + 1
        description = []
        for line in lines[start:]:
            if not line.strip():
                break
            description.append(line)

        assert len(description) > 1
        assert all(line.startswith("      ") for line in description)
        assert all(len(line) <= 50 for line in description)
        assert " ".join(line.strip() for line in description).startswith(
            "Search the product catalogue by free text."
        )

    def test_no_tools(self) -> None:
        """Test a server without tools says so."""
        console, buffer = _console()

        render_server_help(console, "empty", _entry(tools=[]))

        assert "No tools available" in buffer.getvalue()
        assert "Tools:" not in buffer.getvalue()

    def test_markup_not_interpreted(self) -> None:
        """Test brackets in remote text are printed literally."""
        console, buffer = _console()

        render_server_help(
            console,
            "x",
            _entry(
                server_info=ServerInfoEntry(name="[bold]acme[/bold]"),
                tools=[ToolEntry(name="t", description="Returns [items] list")],
            ),
        )

        output = buffer.getvalue()
        assert "[bold]acme[/bold]" in output
        assert "Returns [items] list" in output


class TestMessages:
    """Tests for status messages."""

    def test_success(self) -> None:
        """Test success messages carry a check mark."""
        assert format_success("done").endswith("done")
        assert "✓" in format_success("done")
