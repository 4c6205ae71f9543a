"""Data models for the expected response envelope and probe results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from src.golden.fixture import Fixture


@dataclass(frozen=True)
class RawBody:
    """Response body as text, straight off the wire."""
    text: str


@dataclass(frozen=True)
class DecodedBody:
    """Response body after the caller's validator decoded it."""
    value: Any


@dataclass(frozen=True)
class MarkerBody:
    """Placeholder token standing in for the body during serialization."""
    token: str


Body = Union[RawBody, DecodedBody, MarkerBody]


@dataclass
class ExpectedResponse:
    """The envelope under test: target URL, expectations, captured body."""
    url: str
    status_code: int = 0
    content_type: str = ""
    body: Body | None = None
    fixture: Fixture | None = None

    def filepath(self) -> str:
        """Path of the bound fixture, or ``""`` when none is bound."""
        if self.fixture is None:
            return ""
        return self.fixture.filepath()

    @property
    def raw_body(self) -> str | None:
        if isinstance(self.body, RawBody):
            return self.body.text
        return None

    def envelope(self) -> dict[str, Any]:
        """JSON-ready mapping of the envelope fields.

        The fixture binding is not part of the envelope.
        """
        body: Any
        if isinstance(self.body, RawBody):
            body = self.body.text
        elif isinstance(self.body, DecodedBody):
            body = self.body.value
        elif isinstance(self.body, MarkerBody):
            body = self.body.token
        else:
            body = None
        return {
            "url": self.url,
            "status_code": self.status_code,
            "content_type": self.content_type,
            "body": body,
        }


def new_expected_response(url: str, status_code: int) -> ExpectedResponse:
    """Create an :class:`ExpectedResponse` holding only *url* and *status_code*."""
    if not url:
        raise ValueError("ExpectedResponse requires a non-empty URL")
    return ExpectedResponse(url=url, status_code=status_code)


@dataclass
class ProbeResult:
    """Outcome of one HTTP probe.

    ``response`` is the populated :class:`ExpectedResponse` when a
    response was obtained.  ``error`` carries the last error raised while
    reading or validating the body; it has already been reported and
    only tells later stages not to proceed.  ``body`` holds the bytes
    exactly as read, for decoding again later.
    """
    response: ExpectedResponse | None = None
    error: BaseException | None = None
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return self.error is None and self.response is not None
