"""Shared fixtures for mcpli tests.

HTTP is simulated with real ``requests.Response`` objects whose body is an
in-memory stream, so the transport and decoder run their actual code paths
without touching the network.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from mcpli.container import clear_overrides

ResponseFactory = Callable[..., requests.Response]


def make_response(
    status_code: int = 200,
    body: bytes | str = b"",
    headers: dict[str, str] | None = None,
    url: str = "https://mcp.example.com/mcp/",
) -> requests.Response:
    """Build a streaming response with an in-memory body."""
    if isinstance(body, str):
        body = body.encode("utf-8")

    response = requests.Response()
    response.status_code = status_code
    response.headers = CaseInsensitiveDict(
        headers if headers is not None else {"Content-Type": "text/event-stream"}
    )
    response.url = url
    response.raw = io.BytesIO(body)
    response.encoding = "utf-8"
    return response


def make_redirect(
    location: str,
    status_code: int = 302,
    url: str = "https://mcp.example.com/mcp/",
) -> requests.Response:
    """Build a redirect response pointing at ``location``."""
    return make_response(status_code, b"", {"Location": location}, url=url)


@pytest.fixture
def response_factory() -> ResponseFactory:
    """Factory for streaming responses."""
    return make_response


@pytest.fixture
def redirect_factory() -> ResponseFactory:
    """Factory for redirect responses."""
    return make_redirect


@pytest.fixture(autouse=True)
def reset_container() -> Iterator[None]:
    """Drop container overrides and cached instances around each test."""
    clear_overrides()
    yield
    clear_overrides()
