"""HTTP transport layer implementation.

This module provides HTTP communication for the MCP client with connection
pooling, a method-preserving redirect policy and proper error translation.
It has NO knowledge of JSON-RPC or MCP.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from mcpli.exceptions import ConstructionError
from mcpli.transport.exceptions import (
    HttpError,
    NetworkError,
    TimeoutError,
    TransportError,
)
from mcpli.transport.redirect import DEFAULT_MAX_REDIRECTS, RedirectPolicy

logger = structlog.get_logger(__name__)

# Bytes of a non-2xx body kept on HttpError
ERROR_BODY_LIMIT = 4096


def _error_snippet(response: requests.Response) -> str:
    """Read at most ERROR_BODY_LIMIT bytes of an error body and close it."""
    try:
        chunk = next(response.iter_content(ERROR_BODY_LIMIT), b"")
    except requests.exceptions.RequestException:
        chunk = b""
    finally:
        response.close()
    return chunk.decode("utf-8", errors="replace")


class HttpTransport:
    """HTTP transport for network communication.

    This class sends POST requests with a streamed response body. Redirects
    are followed by :class:`RedirectPolicy` rather than by ``requests``, so
    the method, body and headers of the original request survive every hop.
    Nothing is retried: retry policy belongs to the caller.

    Args:
        timeout: Default request timeout in seconds (default: 30)
        verify_ssl: Whether to verify SSL certificates (default: True)
        max_redirects: Maximum redirect hops to follow (default: 10)
        session: Optional pre-built requests session

    Attributes:
        timeout: Default request timeout in seconds
        verify_ssl: SSL verification flag
        redirect_policy: Policy applied to redirect responses
        session: Configured requests session

    Example:
        >>> transport = HttpTransport(timeout=10)
        >>> response = transport.post(
        ...     "https://example.com/mcp",
        ...     b'{"jsonrpc": "2.0", "method": "tools/list", "params": {}, "id": 2}',
        ...     headers={"Content-Type": "application/json"},
        ... )
        >>> for chunk in response.iter_content(chunk_size=None):
        ...     ...
    """

    def __init__(
        self,
        timeout: float = 30,
        verify_ssl: bool = True,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.redirect_policy = RedirectPolicy(max_redirects=max_redirects)
        self.session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a pooled requests session without transport-level retries.

        Returns:
            Configured requests session
        """
        session = requests.Session()

        # Fail fast: connection and read errors surface to the caller as-is
        adapter = HTTPAdapter(
            max_retries=Retry(total=0, read=False, redirect=False),
            pool_connections=10,
            pool_maxsize=10,
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def prepare(
        self,
        url: str,
        body: bytes,
        headers: Mapping[str, str] | None = None,
    ) -> requests.PreparedRequest:
        """Build the POST request that redirects will replay.

        Args:
            url: Absolute endpoint URL
            body: Encoded request body
            headers: HTTP headers, applied in iteration order

        Returns:
            Prepared request

        Raises:
            ConstructionError: If the URL or a header is malformed
        """
        request = requests.Request("POST", url, data=body, headers=dict(headers or {}))
        try:
            return self.session.prepare_request(request)
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ConstructionError(f"failed to create request: {e}", cause=e) from e

    def post(
        self,
        url: str,
        body: bytes,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> requests.Response:
        """Send an HTTP POST request and return the streaming response.

        The caller owns the returned response and must close it.

        Args:
            url: Absolute endpoint URL
            body: Encoded request body
            headers: Optional HTTP headers
            timeout: Per-call timeout in seconds (defaults to ``self.timeout``)

        Returns:
            Response with a 2xx status whose body has not been read yet

        Raises:
            ConstructionError: If the request cannot be built
            NetworkError: If connection fails
            TimeoutError: If the request times out
            HttpError: If the server returns a non-2xx status code
            TooManyRedirectsError: If the redirect chain is too long
            TransportError: For other transport-level errors
        """
        original = self.prepare(url, body, headers)
        effective_timeout = self.timeout if timeout is None else timeout

        request = original
        response = self._send(request, effective_timeout)
        hops = 0
        while self.redirect_policy.should_follow(response):
            try:
                request = self.redirect_policy.rebuild(original, response, hops)
            finally:
                response.close()
            hops += 1
            response = self._send(request, effective_timeout)

        if not 200 <= response.status_code < 300:
            text = _error_snippet(response)
            logger.debug(
                "Server returned error status",
                url=request.url,
                status_code=response.status_code,
            )
            raise HttpError(
                message=f"server returned status {response.status_code}: {text}",
                status_code=response.status_code,
                body=text,
            )

        return response

    def _send(
        self,
        request: requests.PreparedRequest,
        timeout: float,
    ) -> requests.Response:
        """Send one hop without letting requests follow redirects."""
        settings: dict[str, Any] = self.session.merge_environment_settings(
            request.url, {}, True, self.verify_ssl, None
        )

        logger.debug("Sending HTTP request", method=request.method, url=request.url)

        try:
            return self.session.send(
                request,
                allow_redirects=False,
                timeout=timeout,
                **settings,
            )

        except requests.exceptions.Timeout as e:
            raise TimeoutError(
                message=f"Request timed out after {timeout}s",
                cause=e,
            ) from e

        except requests.exceptions.ConnectionError as e:
            raise NetworkError(
                message=f"Connection failed: {str(e)}",
                cause=e,
            ) from e

        except requests.exceptions.RequestException as e:
            # Catch-all for other requests exceptions
            raise TransportError(
                message=f"Transport error: {str(e)}",
                cause=e,
            ) from e

    def close(self) -> None:
        """Close the HTTP session and release pooled connections."""
        self.session.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
