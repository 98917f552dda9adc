"""Protocol layer for mcpli.

This module speaks MCP (JSON-RPC 2.0) to remote servers. It is responsible
for:
- JSON-RPC envelope models and validation
- Decoding event-stream and JSON response bodies
- The initialize, tools/list and tools/call operations
- Protocol error translation
"""

from mcpli.protocol.client import PROTOCOL_VERSION, McpClient
from mcpli.protocol.envelope import EnvelopeDecoder
from mcpli.protocol.exceptions import DecodeError, FramingError, ProtocolError
from mcpli.protocol.models import (
    Endpoint,
    InitializeResult,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    ListToolsResult,
    ServerInfo,
    Tool,
)

__all__ = [
    # Models
    "Endpoint",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "InitializeResult",
    "ServerInfo",
    "Tool",
    "ListToolsResult",
    # Exceptions
    "ProtocolError",
    "DecodeError",
    "FramingError",
    # Client
    "EnvelopeDecoder",
    "McpClient",
    "PROTOCOL_VERSION",
]
