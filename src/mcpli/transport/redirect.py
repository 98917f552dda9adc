"""Redirect policy for JSON-RPC POST requests.

``requests`` follows redirects the way browsers do: 301/302/303 turn a POST
into a GET and drop the body. For an RPC call that silently turns a tool
invocation into a no-op, so the transport disables automatic redirects and
asks this policy to rebuild each hop from the original request instead.
"""

from __future__ import annotations

from urllib.parse import urljoin

import requests
import structlog
from requests.utils import requote_uri

from mcpli.transport.exceptions import TooManyRedirectsError

logger = structlog.get_logger(__name__)

DEFAULT_MAX_REDIRECTS = 10


class RedirectPolicy:
    """Decide whether and how to follow an HTTP redirect.

    Every redirected request is a copy of the *original* prepared request:
    same method, same body bytes, same headers. Only the URL changes.

    Args:
        max_redirects: Maximum number of hops to follow (default: 10)

    Example:
        >>> policy = RedirectPolicy(max_redirects=5)
        >>> if policy.should_follow(response):
        ...     next_request = policy.rebuild(original, response, hops=0)
    """

    def __init__(self, max_redirects: int = DEFAULT_MAX_REDIRECTS) -> None:
        if max_redirects < 0:
            raise ValueError("max_redirects cannot be negative")
        self.max_redirects = max_redirects

    def should_follow(self, response: requests.Response) -> bool:
        """Return True if the response is a redirect carrying a Location."""
        return response.is_redirect

    def rebuild(
        self,
        original: requests.PreparedRequest,
        response: requests.Response,
        hops: int,
    ) -> requests.PreparedRequest:
        """Build the request for the next hop.

        Args:
            original: The request as first prepared by the transport
            response: The redirect response just received
            hops: Number of redirects already followed

        Returns:
            A new prepared request targeting the redirect location

        Raises:
            TooManyRedirectsError: If ``hops`` already reached the maximum
        """
        location = response.headers.get("Location")
        if hops >= self.max_redirects:
            raise TooManyRedirectsError(self.max_redirects, location=location)

        # Relative locations resolve against the URL that issued the redirect
        target = requote_uri(urljoin(response.url or original.url or "", location or ""))

        if hasattr(original.body, "read"):
            # A stream is consumed by the first hop and cannot be replayed
            raise ValueError("redirect policy requires an in-memory request body")

        redirected = original.copy()
        redirected.prepare_url(target, None)

        logger.debug(
            "Following redirect",
            hop=hops + 1,
            status_code=response.status_code,
            method=redirected.method,
            location=target,
        )
        return redirected
