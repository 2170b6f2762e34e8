"""Tests for courier.http.headers: the header view handlers and middleware read."""

from dataclasses import dataclass

import pytest

from courier.app import App
from courier.endpoints import HttpContextAware, http_get
from courier.http.headers import Headers
from courier.http.request import Request
from courier.mediator import RequestHandler
from courier.testing import TestClient


@dataclass
class Trace(HttpContextAware):
    pass


class TraceHandler(RequestHandler[Trace, dict]):
    @http_get("/trace")
    def handle(self, request: Trace) -> dict:
        assert request.http_context is not None
        headers = request.http_context.headers
        return {"tenant": headers.get("X-Tenant"), "keys": sorted(headers)}


def _scope_headers(*pairs: tuple[bytes, bytes]) -> Request:
    async def receive():
        return {"type": "http.disconnect"}

    scope = {"type": "http", "method": "POST", "path": "/PlaceOrder", "headers": list(pairs)}
    return Request.from_asgi(scope, receive)


class TestLookup:
    def test_names_match_in_any_case(self) -> None:
        headers = Headers(((b"X-Api-Key", b"secret"),))

        assert headers["x-api-key"] == "secret"
        assert "X-API-KEY" in headers

    def test_first_value_wins(self) -> None:
        headers = Headers(((b"content-length", b"2"), (b"content-length", b"5")))

        assert headers["content-length"] == "2"
        assert headers.get_list("Content-Length") == ["2", "5"]

    def test_missing_name(self) -> None:
        headers = Headers()

        assert headers.get("x-api-key") is None
        assert headers.get("x-api-key", "anonymous") == "anonymous"
        assert headers.get_list("x-api-key") == []
        with pytest.raises(KeyError, match="x-api-key"):
            headers["x-api-key"]

    def test_only_strings_are_members(self) -> None:
        assert b"accept" not in Headers(((b"accept", b"*/*"),))

    def test_values_decoded_as_latin1(self) -> None:
        headers = Headers(((b"x-customer", "Zoë".encode("latin-1")),))

        assert headers["x-customer"] == "Zoë"


class TestMapping:
    def test_keys_lowercased_once_each(self) -> None:
        headers = Headers(
            ((b"Accept", b"*/*"), (b"X-Trace", b"a"), (b"x-trace", b"b"), (b"ACCEPT", b"text/*"))
        )

        assert list(headers) == ["accept", "x-trace"]
        assert len(headers) == 2
        assert dict(headers) == {"accept": "*/*", "x-trace": "a"}

    def test_raw_pairs_kept(self) -> None:
        raw = ((b"X-Trace", b"a"),)

        assert Headers(raw).raw is raw

    def test_repr_shows_first_values(self) -> None:
        assert repr(Headers(((b"X-Trace", b"a"), (b"x-trace", b"b")))) == (
            "Headers({'x-trace': 'a'})"
        )


class TestRequestHeaders:
    def test_content_length_from_first_header(self) -> None:
        request = _scope_headers((b"Content-Length", b"12"), (b"content-length", b"99"))

        assert request.content_length == 12

    def test_content_type(self) -> None:
        request = _scope_headers((b"Content-Type", b"application/json"))

        assert request.content_type == "application/json"

    async def test_context_aware_handler_sees_client_headers(self) -> None:
        app = App()
        app.add_handler_types([TraceHandler])
        app.map_mediator()

        async with TestClient(app) as client:
            response = await client.get("/trace", headers={"X-Tenant": "acme"})

        assert response.json["tenant"] == "acme"
        assert "x-tenant" in response.json["keys"]
