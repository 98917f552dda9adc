"""Service layer for mcpli.

Business operations on the server registry, independent of how commands
are parsed or how results are rendered.
"""

from mcpli.services.server import RESERVED_NAMES, ServerService, parse_headers

__all__ = ["RESERVED_NAMES", "ServerService", "parse_headers"]
