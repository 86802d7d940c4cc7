"""easyhttp: small semantic HTTP client with a drop-in mock for tests."""

__version__ = "0.1.0"

from easyhttp.client import Client, MockClient, MockHandler, NetworkClient, new_client, new_mock_client, new_tls_client
from easyhttp.context import Context
from easyhttp.errors import (
    BadStatusError,
    Cancelled,
    ClientError,
    ContextError,
    DeadlineExceeded,
    ParseError,
    RequestContractError,
    SerializationError,
    StreamError,
)
from easyhttp.request import (
    Method,
    Request,
    RequestOption,
    build_request,
    with_header,
    with_json_body,
    with_json_response,
    with_param,
    with_response,
)

__all__ = [
    "BadStatusError",
    "Cancelled",
    "Client",
    "ClientError",
    "Context",
    "ContextError",
    "DeadlineExceeded",
    "Method",
    "MockClient",
    "MockHandler",
    "NetworkClient",
    "ParseError",
    "Request",
    "RequestContractError",
    "RequestOption",
    "SerializationError",
    "StreamError",
    "build_request",
    "new_client",
    "new_mock_client",
    "new_tls_client",
    "with_header",
    "with_json_body",
    "with_json_response",
    "with_param",
    "with_response",
]
