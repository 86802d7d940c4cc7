"""Pytest configuration and fixtures."""

from __future__ import annotations

import asyncio
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import respx
from pydantic import BaseModel

from easyhttp import Context, Method, NetworkClient

BASE_URL = "http://api.test"


class Person(BaseModel):
    name: str = ""


class _Handler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:
        self.server.app(self)  # type: ignore[attr-defined]

    do_POST = do_GET

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        pass


@pytest.fixture()
def mock_api():
    """Activate respx mock for the fake API base URL."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as rsps:
        yield rsps


@pytest.fixture()
def http_server():
    """Real HTTP server on a free port; tests set ``server.app(handler)``."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    server.daemon_threads = True
    server.app = lambda h: (h.send_response(204), h.end_headers())  # type: ignore[attr-defined]
    server.url = f"http://127.0.0.1:{server.server_address[1]}"  # type: ignore[attr-defined]
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture()
def call():
    """Run one request through a fresh NetworkClient inside ``asyncio.run``."""

    def _call(method: Method, url: str, *options, ctx: Context | None = None) -> None:
        async def go() -> None:
            async with NetworkClient() as c:
                entry = c.get if method is Method.GET else c.post
                await entry(ctx or Context.background(), url, *options)

        asyncio.run(go())

    return _call
