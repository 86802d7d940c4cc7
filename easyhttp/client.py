"""Network and mock clients sharing one small semantic interface.

httpx does most of the work; this layer exists so callers get a consistent
way to set params, headers and JSON bodies, a single error type for bad
statuses, and a drop-in ``MockClient`` for tests.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

import httpx

from easyhttp._codec import decode_into, encode_body
from easyhttp.context import Context
from easyhttp.errors import BadStatusError, StreamError
from easyhttp.request import Method, Request, RequestOption, build_request

if TYPE_CHECKING:
    import ssl

logger = logging.getLogger(__name__)

MockHandler = Callable[[Context, Request], Awaitable[None] | None]


class Client(Protocol):
    async def get(self, ctx: Context, url: str, *options: RequestOption) -> None: ...

    async def post(self, ctx: Context, url: str, *options: RequestOption) -> None: ...


class NetworkClient:
    """Executes requests over the network through an ``httpx.AsyncClient``.

    Usage::

        async with NetworkClient() as c:
            user = User()
            await c.get(ctx, "https://api.example.com/me", with_json_response(user))
    """

    def __init__(self, ssl_context: ssl.SSLContext | None = None) -> None:
        kwargs: dict[str, Any] = {"timeout": None, "follow_redirects": True}
        if ssl_context is not None:
            kwargs["verify"] = ssl_context
        self._client = httpx.AsyncClient(**kwargs)
        logger.debug("transport ready (tls config: %s)", "custom" if ssl_context else "default")

    async def get(self, ctx: Context, url: str, *options: RequestOption) -> None:
        await self.execute(ctx, Method.GET, url, *options)

    async def post(self, ctx: Context, url: str, *options: RequestOption) -> None:
        await self.execute(ctx, Method.POST, url, *options)

    async def execute(self, ctx: Context, method: Method | str, url: str, *options: RequestOption) -> None:
        req = build_request(method, url, options)
        http_request = self._prepare(req)
        logger.debug("%s %s", req.method.value, http_request.url)
        async with ctx.bind():
            try:
                response = await self._client.send(http_request, stream=True)
            except httpx.RequestError as e:
                logger.error("%s %s connection failed: %s", req.method.value, req.url, e)
                raise
            try:
                await self._handle_response(req, response)
            finally:
                await response.aclose()

    def _prepare(self, req: Request) -> httpx.Request:
        content = encode_body(req.body) if req.body is not None else None
        return self._client.build_request(req.method.value, req.full_url(), content=content, headers=req.headers)

    async def _handle_response(self, req: Request, response: httpx.Response) -> None:
        if not response.is_success:
            try:
                body = await response.aread()
            except httpx.HTTPError:
                body = b""
            preview = body[:200].decode(errors="replace")
            logger.error("%s %s → %d: %s", req.method.value, req.url, response.status_code, preview)
            raise BadStatusError(response.status_code, body)

        if req.output is not None:
            try:
                async for chunk in response.aiter_bytes():
                    req.output.write(chunk)
            except (OSError, TypeError, ValueError, httpx.HTTPError) as e:
                logger.error("%s %s streaming failed: %s", req.method.value, req.url, e)
                raise StreamError(str(e)) from e
        elif req.json_output is not None:
            decode_into(req.json_output, await response.aread())
        else:
            await response.aread()

    async def aclose(self) -> None:
        await self._client.aclose()
        logger.debug("transport closed")

    async def __aenter__(self) -> NetworkClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()


class MockClient:
    """Hands the built ``Request`` to ``handler`` instead of doing network I/O.

    The handler may be a plain function or a coroutine function; whatever it
    raises is raised from ``get``/``post``.
    """

    def __init__(self, handler: MockHandler) -> None:
        self._handler = handler

    async def get(self, ctx: Context, url: str, *options: RequestOption) -> None:
        await self._do(ctx, Method.GET, url, options)

    async def post(self, ctx: Context, url: str, *options: RequestOption) -> None:
        await self._do(ctx, Method.POST, url, options)

    async def _do(self, ctx: Context, method: Method, url: str, options: tuple[RequestOption, ...]) -> None:
        req = build_request(method, url, options)
        logger.debug("mock %s %s", method.value, req.full_url())
        result = self._handler(ctx, req)
        if inspect.isawaitable(result):
            await result


def new_client() -> NetworkClient:
    """Client using httpx's default transport settings."""
    return NetworkClient()


def new_tls_client(ssl_context: ssl.SSLContext) -> NetworkClient:
    """Client whose transport verifies and identifies itself with ``ssl_context``."""
    return NetworkClient(ssl_context)


def new_mock_client(handler: MockHandler) -> MockClient:
    return MockClient(handler)
