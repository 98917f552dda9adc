"""Response envelope decoding.

MCP servers speaking the streamable HTTP transport answer a POST either with
a plain JSON body or with a ``text/event-stream`` body in which the JSON-RPC
response travels on a ``data: `` line::

    : keep-alive
    event: message
    data: {"jsonrpc":"2.0","id":2,"result":{"tools":[]}}

Only the first response frame matters; everything else on the stream
(comments, pings, progress notifications) is skipped.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Iterator

import structlog
from pydantic import ValidationError

from mcpli.protocol.exceptions import FramingError
from mcpli.protocol.models import JsonRpcResponse

logger = structlog.get_logger(__name__)

DATA_PREFIX = b"data: "
MAX_LINE_SIZE = 1024 * 1024

_WHITESPACE = re.compile(r"[ \t\n\r]*")
_scanner = json.JSONDecoder()


def split_members(text: str) -> dict[str, str]:
    """Map each top-level member of a JSON object to its value text.

    Values are sliced out of ``text`` rather than re-encoded, so the caller
    can hand them on byte for byte.

    Example:
        >>> split_members('{"id":3, "result": {"p":1.10}}')
        {'id': '3', 'result': '{"p":1.10}'}

    Raises:
        ValueError: If ``text`` is not a JSON object
    """
    members: dict[str, str] = {}
    idx = _WHITESPACE.match(text, 0).end()
    if text[idx:idx + 1] != "{":
        raise ValueError("expected a JSON object")
    idx = _WHITESPACE.match(text, idx + 1).end()
    if text[idx:idx + 1] == "}":
        return members

    while True:
        if text[idx:idx + 1] != '"':
            raise ValueError(f"expected member name at offset {idx}")
        key, idx = _scanner.raw_decode(text, idx)
        idx = _WHITESPACE.match(text, idx).end()
        if text[idx:idx + 1] != ":":
            raise ValueError(f"expected ':' at offset {idx}")
        start = _WHITESPACE.match(text, idx + 1).end()
        _, end = _scanner.raw_decode(text, start)
        members[key] = text[start:end]

        idx = _WHITESPACE.match(text, end).end()
        separator = text[idx:idx + 1]
        if separator == "}":
            return members
        if separator != ",":
            raise ValueError(f"expected ',' or '}}' at offset {idx}")
        idx = _WHITESPACE.match(text, idx + 1).end()


class EnvelopeDecoder:
    """Extract one JSON-RPC response from a streamed response body.

    Args:
        max_line_size: Largest accepted line in bytes (default: 1 MiB)

    Example:
        >>> decoder = EnvelopeDecoder()
        >>> response = decoder.decode_event_stream(
        ...     [b'data: {"jsonrpc":"2.0","id":1,"result":{}}\\n'],
        ...     expected_id=1,
        ... )
        >>> response.result
        {}
    """

    def __init__(self, max_line_size: int = MAX_LINE_SIZE) -> None:
        self.max_line_size = max_line_size

    def iter_lines(self, chunks: Iterable[bytes]) -> Iterator[bytes]:
        """Split a chunked byte stream into lines.

        Lines end with LF; a trailing CR is dropped. A final line without
        terminator is still yielded.

        Raises:
            FramingError: If a line grows beyond ``max_line_size``
        """
        pending = bytearray()
        for chunk in chunks:
            start = 0
            newline = chunk.find(b"\n", start)
            while newline != -1:
                pending += chunk[start:newline]
                yield self._finish_line(pending)
                pending = bytearray()
                start = newline + 1
                newline = chunk.find(b"\n", start)
            pending += chunk[start:]
            # A CR waiting for its LF is not part of the line
            limit = self.max_line_size + (1 if pending.endswith(b"\r") else 0)
            if len(pending) > limit:
                raise FramingError(
                    f"response line exceeds {self.max_line_size} bytes"
                )
        if pending:
            yield self._finish_line(pending)

    def _finish_line(self, line: bytearray) -> bytes:
        if line.endswith(b"\r"):
            del line[-1]
        if len(line) > self.max_line_size:
            raise FramingError(f"response line exceeds {self.max_line_size} bytes")
        return bytes(line)

    def decode_event_stream(
        self,
        chunks: Iterable[bytes],
        expected_id: int | str | None = None,
    ) -> JsonRpcResponse:
        """Return the first well-formed response found on ``data: `` lines.

        Args:
            chunks: Response body chunks
            expected_id: If given, frames answering another request are skipped

        Returns:
            Parsed response envelope

        Raises:
            FramingError: If no response is found, reading fails, or a line
                is too long
        """
        try:
            for line in self.iter_lines(chunks):
                if not line.startswith(DATA_PREFIX):
                    continue
                response = self._parse_candidate(line[len(DATA_PREFIX):], expected_id)
                if response is not None:
                    return response
        except OSError as e:
            raise FramingError(
                "no JSON-RPC response found in event stream", cause=e
            ) from e

        raise FramingError("no JSON-RPC response found in event stream")

    def decode_json_body(
        self,
        chunks: Iterable[bytes],
        expected_id: int | str | None = None,
    ) -> JsonRpcResponse:
        """Parse a plain ``application/json`` body as one response envelope.

        Raises:
            FramingError: If the body is too large, unreadable, or not a
                response envelope
        """
        body = bytearray()
        try:
            for chunk in chunks:
                body += chunk
                if len(body) > self.max_line_size:
                    raise FramingError(
                        f"response body exceeds {self.max_line_size} bytes"
                    )
        except OSError as e:
            raise FramingError("no JSON-RPC response found in body", cause=e) from e

        response = self._parse_candidate(bytes(body), expected_id)
        if response is None:
            raise FramingError("no JSON-RPC response found in body")
        return response

    def _parse_candidate(
        self,
        payload: bytes,
        expected_id: int | str | None,
    ) -> JsonRpcResponse | None:
        try:
            response = JsonRpcResponse.model_validate_json(payload)
        except ValidationError:
            logger.debug("Skipping unparseable frame", size=len(payload))
            return None

        # A null id answers a request the server could not identify
        if expected_id is not None and response.id is not None and response.id != expected_id:
            logger.debug(
                "Skipping frame for another request",
                expected_id=expected_id,
                frame_id=response.id,
            )
            return None

        try:
            response._raw_members = split_members(payload.decode("utf-8"))
        except ValueError:
            logger.debug("Skipping frame that is not a JSON object", size=len(payload))
            return None
        return response
