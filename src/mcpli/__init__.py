"""mcpli - invoke MCP server tools from the command line."""

__version__ = "0.1.0"
