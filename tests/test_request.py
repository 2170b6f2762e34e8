"""Tests for courier.http.request: frozen Request with async body access."""

import asyncio
import json

import pytest

from courier.http.request import Request
from courier.routing.route import Route, RouteMatch


def _make_scope(**overrides: object) -> dict[str, object]:
    """Build a minimal valid ASGI HTTP scope."""
    base: dict[str, object] = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "path": "/",
        "raw_path": b"/",
        "query_string": b"",
        "root_path": "",
        "headers": [],
        "server": ("localhost", 8000),
        "client": ("127.0.0.1", 54321),
    }
    base.update(overrides)
    return base


def _make_receive(*bodies: bytes):
    """Create an ASGI receive callable that yields bodies."""
    messages = []
    for i, body in enumerate(bodies):
        is_last = i == len(bodies) - 1
        messages.append({"type": "http.request", "body": body, "more_body": not is_last})
    if not messages:
        messages.append({"type": "http.request", "body": b"", "more_body": False})
    it = iter(messages)

    async def receive():
        return next(it)

    return receive


class TestRequestFromASGI:
    def test_basic_fields(self) -> None:
        scope = _make_scope(method="POST", path="/users")
        req = Request.from_asgi(scope, _make_receive())

        assert req.method == "POST"
        assert req.path == "/users"
        assert req.http_version == "1.1"
        assert req.server == ("localhost", 8000)
        assert req.client == ("127.0.0.1", 54321)

    def test_path_params_default_empty(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive())
        assert req.path_params == {}
        assert req.route is None

    def test_headers_parsed(self) -> None:
        scope = _make_scope(
            headers=[(b"content-type", b"application/json"), (b"accept", b"*/*")]
        )
        req = Request.from_asgi(scope, _make_receive())

        assert req.headers["content-type"] == "application/json"
        assert req.headers["accept"] == "*/*"

    def test_query_string_kept_raw(self) -> None:
        scope = _make_scope(query_string=b"q=hello&page=2")
        req = Request.from_asgi(scope, _make_receive())

        assert req.query_string == b"q=hello&page=2"

    def test_missing_server_and_client(self) -> None:
        scope = _make_scope()
        del scope["server"]
        del scope["client"]
        req = Request.from_asgi(scope, _make_receive())

        assert req.server is None
        assert req.client is None


class TestRequestProperties:
    def test_content_type(self) -> None:
        scope = _make_scope(headers=[(b"content-type", b"application/json")])
        req = Request.from_asgi(scope, _make_receive())

        assert req.content_type == "application/json"

    def test_content_length(self) -> None:
        scope = _make_scope(headers=[(b"content-length", b"42")])
        req = Request.from_asgi(scope, _make_receive())

        assert req.content_length == 42

    def test_content_length_missing(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive())
        assert req.content_length is None

    def test_content_length_invalid(self) -> None:
        scope = _make_scope(headers=[(b"content-length", b"abc")])
        req = Request.from_asgi(scope, _make_receive())

        assert req.content_length is None


class TestRequestBody:
    async def test_body(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"hello world"))

        assert await req.body() == b"hello world"

    async def test_body_chunked(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"hello ", b"world"))

        assert await req.body() == b"hello world"

    async def test_body_cached(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"once"))

        assert await req.body() == b"once"
        # receive is exhausted; a second read must come from the cache
        assert await req.body() == b"once"

    async def test_body_empty(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive())

        assert await req.body() == b""

    async def test_text(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"hello"))

        assert await req.text() == "hello"

    async def test_json(self) -> None:
        data = json.dumps({"key": "value"}).encode()
        req = Request.from_asgi(_make_scope(), _make_receive(data))

        assert await req.json() == {"key": "value"}

    async def test_stream(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"chunk1", b"chunk2"))

        chunks = [chunk async for chunk in req.stream()]
        assert chunks == [b"chunk1", b"chunk2"]

    async def test_disconnect_during_body_ends_stream(self) -> None:
        messages = iter(
            [
                {"type": "http.request", "body": b"part", "more_body": True},
                {"type": "http.disconnect"},
            ]
        )

        async def receive():
            return next(messages)

        req = Request.from_asgi(_make_scope(), receive)

        assert await req.body() == b"part"
        assert req.is_disconnected is True


class TestWaitForDisconnect:
    async def test_returns_on_disconnect(self) -> None:
        queue: asyncio.Queue[dict[str, object]] = asyncio.Queue()
        await queue.put({"type": "http.request", "body": b"", "more_body": False})
        req = Request.from_asgi(_make_scope(), queue.get)
        await req.body()

        waiter = asyncio.create_task(req.wait_for_disconnect())
        await asyncio.sleep(0)
        assert not waiter.done()

        await queue.put({"type": "http.disconnect"})
        await asyncio.wait_for(waiter, timeout=1)
        assert req.is_disconnected is True

    async def test_returns_immediately_when_already_disconnected(self) -> None:
        async def receive():
            return {"type": "http.disconnect"}

        req = Request.from_asgi(_make_scope(), receive)
        await req.body()

        await asyncio.wait_for(req.wait_for_disconnect(), timeout=1)


class TestWithMatch:
    def test_binds_route_and_params(self) -> None:
        route = Route("/users/{id}", lambda: None, frozenset({"GET"}))
        req = Request.from_asgi(_make_scope(path="/users/7"), _make_receive())

        bound = req.with_match(RouteMatch(route=route, path_params={"id": "7"}))

        assert bound.route is route
        assert bound.path_params == {"id": "7"}
        assert req.route is None

    async def test_shares_body_cache(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive(b"payload"))
        await req.body()

        route = Route("/", lambda: None, frozenset({"GET"}))
        bound = req.with_match(RouteMatch(route=route, path_params={}))

        assert await bound.body() == b"payload"


class TestRequestFrozen:
    def test_cannot_mutate(self) -> None:
        req = Request.from_asgi(_make_scope(), _make_receive())

        with pytest.raises(AttributeError):
            req.method = "POST"  # type: ignore[misc]
