"""JSON-RPC 2.0 and MCP protocol models.

This module defines Pydantic models for the JSON-RPC envelopes exchanged
with MCP servers and for the payloads of ``initialize`` and ``tools/list``.

References:
    JSON-RPC 2.0 Specification: https://www.jsonrpc.org/specification
    Model Context Protocol: https://modelcontextprotocol.io/specification
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, model_validator


class Endpoint(BaseModel):
    """Remote MCP server address.

    Attributes:
        url: Endpoint URL, used verbatim (trailing slashes are significant)
        headers: Static headers sent with every request, keys as supplied

    Example:
        >>> endpoint = Endpoint(
        ...     url="https://mcp.example.com/mcp/",
        ...     headers={"Authorization": "Bearer abc"},
        ... )
    """

    url: str = Field(..., description="Endpoint URL")
    headers: dict[str, str] = Field(default_factory=dict, description="Static headers")

    model_config = ConfigDict(frozen=True)


class JsonRpcError(BaseModel):
    """JSON-RPC 2.0 error object.

    Unknown members are kept so the object can be relayed verbatim.

    Attributes:
        code: Error code (integer)
        message: Human-readable error message
        data: Additional error information (optional)
    """

    code: int = Field(..., description="Error code")
    message: str = Field(..., description="Error message")
    data: Any = Field(default=None, description="Additional error data")

    model_config = ConfigDict(extra="allow")

    def to_wire(self) -> dict[str, Any]:
        """Return the error object as it appeared on the wire."""
        wire: dict[str, Any] = {"code": self.code, "message": self.message}
        if "data" in self.model_fields_set:
            wire["data"] = self.data
        wire.update(self.model_extra or {})
        return wire


class JsonRpcRequest(BaseModel):
    """JSON-RPC 2.0 request object.

    Attributes:
        jsonrpc: Protocol version (always "2.0")
        method: Method name to invoke
        params: Method parameters (opaque JSON value)
        id: Request identifier

    Example:
        >>> request = JsonRpcRequest(method="tools/list", params={}, id=2)
        >>> request.model_dump_json()
        '{"jsonrpc":"2.0","method":"tools/list","params":{},"id":2}'
    """

    jsonrpc: Literal["2.0"] = Field(default="2.0", description="JSON-RPC version")
    method: str = Field(..., description="Method name to invoke")
    params: Any = Field(default_factory=dict, description="Method parameters")
    id: int | str = Field(..., description="Request ID")


class JsonRpcResponse(BaseModel):
    """JSON-RPC 2.0 response object.

    Exactly one of ``result`` and ``error`` is present. The wire format does
    not guarantee this, so it is enforced at validation time: frames that
    carry neither (notifications, server requests) or both are rejected.

    Attributes:
        jsonrpc: Protocol version (always "2.0")
        id: Request identifier (echoed from request, null if unknown)
        result: Method result (opaque JSON value)
        error: Error object

    Example:
        >>> response = JsonRpcResponse(id=3, result={"ok": True})
        >>> response.raw_member("result")
        '{"ok":true}'
    """

    jsonrpc: Literal["2.0"] = Field(default="2.0", description="JSON-RPC version")
    id: int | str | None = Field(default=None, description="Request ID")
    result: Any = Field(default=None, description="Method result")
    error: JsonRpcError | None = Field(default=None, description="Error object")

    # Member name -> value text exactly as received, filled in by the decoder
    _raw_members: dict[str, str] = PrivateAttr(default_factory=dict)

    def raw_member(self, name: str) -> str:
        """Return the JSON text of a top-level member.

        Decoded envelopes keep the bytes the server sent, so numbers and
        spacing survive untouched. Envelopes built in code fall back to a
        compact serialization.
        """
        raw = self._raw_members.get(name)
        if raw is not None:
            return raw
        value = getattr(self, name)
        if isinstance(value, JsonRpcError):
            value = value.to_wire()
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)

    @model_validator(mode="after")
    def _check_result_or_error(self) -> JsonRpcResponse:
        has_result = "result" in self.model_fields_set
        if self.error is None and not has_result:
            raise ValueError("response carries neither result nor error")
        if self.error is not None and has_result and self.result is not None:
            raise ValueError("response carries both result and error")
        return self


class ServerInfo(BaseModel):
    """Remote server identity."""

    name: str
    version: str


class InitializeResult(BaseModel):
    """Result of the ``initialize`` handshake.

    Attributes:
        protocol_version: Protocol revision negotiated by the server
        server_info: Server name and version
        capabilities: Capabilities advertised by the server
        instructions: Optional usage hints from the server
    """

    protocol_version: str = Field(..., alias="protocolVersion")
    server_info: ServerInfo = Field(..., alias="serverInfo")
    capabilities: dict[str, Any] = Field(default_factory=dict)
    instructions: str | None = None

    model_config = ConfigDict(populate_by_name=True)


class Tool(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    name: str
    description: str = ""
    input_schema: dict[str, Any] | None = Field(default=None, alias="inputSchema")

    model_config = ConfigDict(populate_by_name=True)


class ListToolsResult(BaseModel):
    """Result of ``tools/list``.

    ``next_cursor`` is only read to detect pagination, which is not followed.
    """

    tools: list[Tool] = Field(default_factory=list)
    next_cursor: str | None = Field(default=None, alias="nextCursor")

    model_config = ConfigDict(populate_by_name=True)
