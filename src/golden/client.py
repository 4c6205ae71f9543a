"""Synchronous HTTP GET client used by the probe."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from src.shared.config import HarnessConfig
from src.shared.constants import DEFAULT_HTTP_TIMEOUT

logger = logging.getLogger(__name__)


class HTTPClient:
    """Thin wrapper around :class:`httpx.Client` for streaming GETs.

    Responses are returned unread; the caller reads the body once and
    must close the response.  Transport failures raise
    :class:`httpx.HTTPError` subclasses, while non-2xx statuses are
    ordinary responses.

    Parameters
    ----------
    timeout:
        HTTP request timeout in seconds.
    follow_redirects:
        Whether 3xx responses are followed.
    transport:
        Optional httpx transport, e.g. :class:`httpx.MockTransport`.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        follow_redirects: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            follow_redirects=follow_redirects,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: HarnessConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> HTTPClient:
        return cls(
            timeout=config.http_timeout,
            follow_redirects=config.follow_redirects,
            transport=transport,
        )

    def get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        """Send a GET to *url* and return the still-unread response."""
        request = self._client.build_request("GET", url, headers=headers)
        logger.debug("GET %s", url)
        return self._client.send(request, stream=True)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HTTPClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def is_connection_refused(exc: BaseException) -> bool:
    """Return True when *exc* means nothing is listening at the target."""
    if not isinstance(exc, httpx.ConnectError):
        return False
    if "connection refused" in str(exc).lower():
        return True
    cause = exc.__cause__ or exc.__context__
    while cause is not None:
        if isinstance(cause, ConnectionRefusedError):
            return True
        cause = cause.__cause__ or cause.__context__
    return False
