"""Request descriptor and the options that configure it."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import Enum
from typing import IO, Any

import httpx

from easyhttp.errors import RequestContractError

logger = logging.getLogger(__name__)


class Method(str, Enum):
    """Supported HTTP methods."""

    GET = "GET"
    POST = "POST"


class Request:
    """Requested behavior of one HTTP call.

    Built fresh for every call by applying ``RequestOption`` values in order.
    Exposed mainly so ``MockClient`` handlers can assert on it.
    """

    __slots__ = ("_method", "_url", "body", "headers", "json_output", "output", "params")

    def __init__(self, method: Method | str, url: str) -> None:
        self._method = Method(method)
        self._url = url
        self.params = httpx.QueryParams()
        self.headers = httpx.Headers()
        self.body: Any = None
        self.json_output: Any = None
        self.output: IO[bytes] | None = None

    @property
    def method(self) -> Method:
        return self._method

    @property
    def url(self) -> str:
        return self._url

    def full_url(self) -> str:
        """URL with the encoded query string, ``?`` only when there are params."""
        if not self.params:
            return self._url
        return f"{self._url}?{self.params}"

    def __repr__(self) -> str:
        return f"<Request {self._method.value} {self.full_url()}>"


RequestOption = Callable[[Request], None]


def build_request(method: Method | str, url: str, options: Iterable[RequestOption] = ()) -> Request:
    req = Request(method, url)
    for option in options:
        option(req)
    return req


def _add_header(req: Request, key: str, value: str) -> None:
    req.headers = httpx.Headers([*req.headers.raw, (key.encode(), value.encode())])


def with_json_response(target: Any) -> RequestOption:
    """Decode the JSON response body into ``target``.

    ``target`` may be a pydantic model instance, a dataclass instance, a dict
    or a list; it is updated in place.
    """

    def apply(req: Request) -> None:
        req.json_output = target
        _add_header(req, "Accept", "application/json")

    return apply


def with_response(sink: IO[bytes]) -> RequestOption:
    """Stream the raw response body into ``sink``."""

    def apply(req: Request) -> None:
        req.output = sink

    return apply


def with_param(key: str, value: str) -> RequestOption:
    """Add a query parameter. Repeated keys keep every value."""

    def apply(req: Request) -> None:
        req.params = req.params.add(key, value)

    return apply


def with_json_body(body: Any) -> RequestOption:
    """Send ``body`` JSON-encoded. Not allowed on GET requests."""

    def apply(req: Request) -> None:
        if req.method is Method.GET:
            logger.critical("refusing to attach a body to GET %s", req.url)
            raise RequestContractError("GET requests cannot have a body")
        req.body = body
        _add_header(req, "Content-Type", "application/json")

    return apply


def with_header(key: str, value: str) -> RequestOption:
    """Add a request header. Repeated names keep every value."""

    def apply(req: Request) -> None:
        _add_header(req, key, value)

    return apply
