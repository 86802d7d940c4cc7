"""Exception types raised by easyhttp clients."""

from __future__ import annotations

from http import HTTPStatus


class ClientError(Exception):
    """Base class for errors raised while executing a request."""


class RequestContractError(AssertionError):
    """A request was configured in a way the caller must never do (e.g. a GET body).

    Deliberately not a ``ClientError``: it signals a bug in the calling code,
    not a runtime condition to be handled.
    """


class SerializationError(ClientError):
    """The request body could not be encoded as JSON."""


class StreamError(ClientError):
    """Copying the response body into the output sink failed."""


class ParseError(ClientError, ValueError):
    """The response body could not be decoded into the JSON target."""


class ContextError(ClientError):
    """The call was abandoned because its context finished."""


class Cancelled(ContextError):
    def __init__(self) -> None:
        super().__init__("context cancelled")


class DeadlineExceeded(ContextError):
    def __init__(self) -> None:
        super().__init__("context deadline exceeded")


def _status_text(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ""


class BadStatusError(ClientError):
    """Response status outside [200, 300).

    Compares equal to any other ``BadStatusError`` with the same code and body.
    """

    def __init__(self, code: int, body: bytes = b"") -> None:
        super().__init__(code, body)
        self._code = code
        self._body = bytes(body)

    @property
    def code(self) -> int:
        return self._code

    @property
    def body(self) -> bytes:
        return self._body

    def __str__(self) -> str:
        return f"Got HTTP {self._code} ({_status_text(self._code)}): {self._body.decode(errors='replace')!r}"

    def __repr__(self) -> str:
        return f"BadStatusError(code={self._code}, body={self._body!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BadStatusError):
            return NotImplemented
        return (self._code, self._body) == (other._code, other._body)

    def __hash__(self) -> int:
        return hash((self._code, self._body))
