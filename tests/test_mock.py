"""Tests for easyhttp.client.MockClient."""

from __future__ import annotations

import asyncio
import io

import pytest

from easyhttp import BadStatusError, Context, Method, Request, RequestContractError, new_mock_client
from easyhttp.request import with_header, with_json_body, with_json_response, with_param, with_response


class TestMockClient:
    def test_handler_receives_request(self):
        seen: list[tuple[Context, Request]] = []
        ctx = Context.background()
        sink = io.BytesIO()

        def handler(c: Context, req: Request) -> None:
            seen.append((c, req))

        client = new_mock_client(handler)
        asyncio.run(
            client.get(ctx, "http://svc/items", with_param("page", "2"), with_header("X-Id", "7"), with_response(sink))
        )

        assert len(seen) == 1
        got_ctx, req = seen[0]
        assert got_ctx is ctx
        assert req.method is Method.GET
        assert req.url == "http://svc/items"
        assert req.params.get_list("page") == ["2"]
        assert req.headers["x-id"] == "7"
        assert req.output is sink

    def test_post_body_visible_to_handler(self):
        bodies = []
        client = new_mock_client(lambda ctx, req: bodies.append((req.method, req.body)))
        asyncio.run(client.post(Context.background(), "http://svc/users", with_json_body({"name": "alex"})))
        assert bodies == [(Method.POST, {"name": "alex"})]

    def test_async_handler(self):
        async def handler(ctx: Context, req: Request) -> None:
            req.json_output["name"] = "from-mock"

        target: dict = {}
        asyncio.run(new_mock_client(handler).get(Context.background(), "http://svc", with_json_response(target)))
        assert target == {"name": "from-mock"}

    def test_handler_error_propagates(self):
        def handler(ctx: Context, req: Request) -> None:
            raise BadStatusError(503, b"down")

        with pytest.raises(BadStatusError) as exc_info:
            asyncio.run(new_mock_client(handler).get(Context.background(), "http://svc"))
        assert exc_info.value == BadStatusError(503, b"down")

    def test_get_with_body_never_reaches_handler(self):
        calls = []
        client = new_mock_client(lambda ctx, req: calls.append(req))
        with pytest.raises(RequestContractError):
            asyncio.run(client.get(Context.background(), "http://svc", with_json_body({"a": 1})))
        assert calls == []

    def test_no_response_handling(self):
        sink = io.BytesIO()
        client = new_mock_client(lambda ctx, req: None)
        asyncio.run(client.get(Context.background(), "http://svc", with_response(sink)))
        assert sink.getvalue() == b""
