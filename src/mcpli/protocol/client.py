"""MCP client over HTTP.

Implements the three MCP operations mcpli needs (``initialize``,
``tools/list`` and ``tools/call``) as single JSON-RPC POST round trips.
The client keeps no session state: each call is independent and the only
thing it owns is an immutable :class:`Endpoint`.
"""

from __future__ import annotations

import json
from contextlib import closing
from typing import Any

import structlog
from pydantic import ValidationError

from mcpli import __version__
from mcpli.exceptions import ConstructionError
from mcpli.protocol.envelope import EnvelopeDecoder
from mcpli.protocol.exceptions import DecodeError, ProtocolError
from mcpli.protocol.models import (
    Endpoint,
    InitializeResult,
    JsonRpcRequest,
    JsonRpcResponse,
    ListToolsResult,
    Tool,
)
from mcpli.transport.http import HttpTransport

logger = structlog.get_logger(__name__)

PROTOCOL_VERSION = "2024-11-05"
CLIENT_NAME = "mcpli"

# Calls are issued one at a time per client, so fixed ids cannot collide
INITIALIZE_ID = 1
LIST_TOOLS_ID = 2
CALL_TOOL_ID = 3


class McpClient:
    """Synchronous MCP client for one HTTP endpoint.

    Every operation sends one POST with ``Content-Type: application/json``
    and ``Accept: application/json, text/event-stream``; the endpoint's
    static headers are applied last and win on collision.

    Args:
        endpoint: Server URL and static headers
        transport: HTTP transport (a default one is created if omitted)
        decoder: Response envelope decoder

    Attributes:
        endpoint: Immutable server address
        transport: HTTP transport for network communication
        decoder: Envelope decoder

    Example:
        >>> client = McpClient(Endpoint(url="https://mcp.example.com/mcp/"))
        >>> info = client.initialize()
        >>> tools = client.list_tools()
        >>> result = client.call_tool("search", '{"q": "milk"}')
    """

    def __init__(
        self,
        endpoint: Endpoint,
        transport: HttpTransport | None = None,
        decoder: EnvelopeDecoder | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.transport = transport or HttpTransport()
        self.decoder = decoder or EnvelopeDecoder()

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        }
        headers.update(self.endpoint.headers)
        return headers

    def _do_request(
        self,
        method: str,
        params: Any,
        request_id: int,
        timeout: float | None = None,
    ) -> JsonRpcResponse:
        """Send one JSON-RPC request and decode its response envelope.

        Raises:
            ConstructionError: If the request cannot be serialized or built
            TransportError: If the HTTP exchange fails
            FramingError: If no response envelope is found in the body
        """
        request = JsonRpcRequest(method=method, params=params, id=request_id)
        try:
            body = request.model_dump_json().encode("utf-8")
        except (TypeError, ValueError) as e:
            raise ConstructionError(f"failed to marshal request: {e}", cause=e) from e

        logger.debug(
            "Sending JSON-RPC request",
            method=method,
            request_id=request_id,
            url=self.endpoint.url,
        )

        response = self.transport.post(
            self.endpoint.url,
            body,
            headers=self._build_headers(),
            timeout=timeout,
        )
        with closing(response):
            chunks = response.iter_content(chunk_size=64 * 1024)
            content_type = response.headers.get("Content-Type", "")
            if content_type.split(";")[0].strip().lower() == "application/json":
                envelope = self.decoder.decode_json_body(chunks, expected_id=request_id)
            else:
                envelope = self.decoder.decode_event_stream(chunks, expected_id=request_id)

        logger.debug(
            "Received JSON-RPC response",
            method=method,
            request_id=request_id,
            is_error=envelope.error is not None,
        )
        return envelope

    @staticmethod
    def _raise_for_error(envelope: JsonRpcResponse) -> None:
        if envelope.error is not None:
            raise ProtocolError(
                envelope.error.message,
                code=envelope.error.code,
                data=envelope.error.data,
            )

    def initialize(self, timeout: float | None = None) -> InitializeResult:
        """Perform the MCP initialize handshake.

        Args:
            timeout: Per-call timeout in seconds

        Returns:
            Negotiated protocol version and server identity

        Raises:
            ProtocolError: If the server answers with an error object
            DecodeError: If the result does not look like an initialize result
            TransportError: If the HTTP exchange fails
            FramingError: If no response envelope is found
        """
        params = {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": {"name": CLIENT_NAME, "version": __version__},
        }
        envelope = self._do_request("initialize", params, INITIALIZE_ID, timeout)
        self._raise_for_error(envelope)

        try:
            result = InitializeResult.model_validate(envelope.result)
        except ValidationError as e:
            raise DecodeError("failed to parse initialize result", cause=e) from e

        logger.info(
            "Initialized MCP session",
            server=result.server_info.name,
            server_version=result.server_info.version,
            protocol_version=result.protocol_version,
        )
        return result

    def list_tools(self, timeout: float | None = None) -> list[Tool]:
        """Retrieve the tools offered by the server.

        Args:
            timeout: Per-call timeout in seconds

        Returns:
            Tool definitions in the order reported by the server

        Raises:
            ProtocolError: If the server answers with an error object
            DecodeError: If the result does not look like a tool list
            TransportError: If the HTTP exchange fails
            FramingError: If no response envelope is found
        """
        envelope = self._do_request("tools/list", {}, LIST_TOOLS_ID, timeout)
        self._raise_for_error(envelope)

        try:
            result = ListToolsResult.model_validate(envelope.result)
        except ValidationError as e:
            raise DecodeError("failed to parse tools list", cause=e) from e

        if result.next_cursor:
            logger.warning(
                "Server paginates tools/list; only the first page is used",
                url=self.endpoint.url,
                tools=len(result.tools),
            )
        return result.tools

    def call_tool(
        self,
        name: str,
        arguments: str | bytes | None = None,
        timeout: float | None = None,
    ) -> str:
        """Invoke a tool and return its result as the server sent it.

        Tool-level failures are part of the tool's result contract: when the
        response carries an error object it is returned as
        ``{"error":<error object>}`` instead of being raised. In both cases
        the member text is relayed unchanged from the response frame.

        Args:
            name: Tool name
            arguments: Tool arguments as JSON text (omitted when empty)
            timeout: Per-call timeout in seconds

        Returns:
            JSON text of the ``result`` value, or of ``{"error":...}``

        Raises:
            ConstructionError: If ``arguments`` is not valid JSON
            TransportError: If the HTTP exchange fails
            FramingError: If no response envelope is found
        """
        params: dict[str, Any] = {"name": name}
        if arguments:
            try:
                params["arguments"] = json.loads(arguments)
            except ValueError as e:
                raise ConstructionError(f"invalid arguments JSON: {e}", cause=e) from e

        envelope = self._do_request("tools/call", params, CALL_TOOL_ID, timeout)
        if envelope.error is not None:
            return '{"error":' + envelope.raw_member("error") + "}"
        return envelope.raw_member("result")
