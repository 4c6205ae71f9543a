"""Shared test fixtures for the golden harness test suite."""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

from src.golden.client import HTTPClient

pytest_plugins = ["pytester", "src.golden.pytest_plugin"]

Handler = Callable[[httpx.Request], httpx.Response]


def json_response(
    status_code: int = 200,
    body: bytes | str = b'{"a":1}',
    content_type: str | list[str] | None = "application/json",
) -> Handler:
    """Handler answering every request with the same canned response."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    headers: list[tuple[str, str]] = []
    if isinstance(content_type, str):
        headers.append(("Content-Type", content_type))
    elif content_type:
        headers.extend(("Content-Type", value) for value in content_type)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=body, headers=headers)

    return handler


def refusing(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("[Errno 111] Connection refused", request=request)


@pytest.fixture
def fixtures_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty directory holding a ``fixtures`` folder."""
    (tmp_path / "fixtures").mkdir()
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def mock_client() -> Any:
    """Factory for :class:`HTTPClient` objects backed by a mock transport."""
    clients: list[HTTPClient] = []

    def factory(handler: Handler) -> HTTPClient:
        client = HTTPClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


@pytest.fixture
def respond() -> Callable[..., Handler]:
    """``respond(status_code, body, content_type)`` builds a canned handler."""
    return json_response


@pytest.fixture
def refuse() -> Handler:
    """Handler that fails like a port with nothing listening."""
    return refusing
