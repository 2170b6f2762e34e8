"""Immutable HTTP request.

Frozen metadata with async body access. The request is honest about
what it is: received data that doesn't change.
"""

from __future__ import annotations

import json as json_module
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import Any

from courier._internal.asgi import Receive
from courier.http.headers import Headers
from courier.routing.route import Route, RouteMatch


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    The body is read asynchronously via ``.body()``, ``.json()`` or
    ``.text()`` and cached after the first read.

    ``route`` is the endpoint the router selected. It is ``None`` until
    routing has happened, so middleware and endpoints always see it set.
    """

    method: str
    path: str
    headers: Headers
    path_params: dict[str, str]
    query_string: bytes
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    route: Route | None

    # Private: ASGI receive callable for body streaming
    _receive: Receive

    # Private: mutable cache for the body and disconnect state
    # (dict contents are mutable even though the field reference is frozen)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int, ``None`` if absent or invalid."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    @property
    def is_disconnected(self) -> bool:
        """True once ``http.disconnect`` has been received."""
        return self._cache.get("_disconnected", False)

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached — the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        while True:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                self._cache["_disconnected"] = True
                break
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(await self.body())

    async def text(self) -> str:
        """Read the body as text (UTF-8)."""
        raw = await self.body()
        return raw.decode("utf-8")

    async def wait_for_disconnect(self) -> None:
        """Block until the client disconnects.

        Only meaningful after the body has been read: any body message
        that arrives here is discarded.
        """
        while not self.is_disconnected:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                self._cache["_disconnected"] = True

    # -- Transformations --

    def with_match(self, match: RouteMatch) -> Request:
        """Return a copy bound to the matched route and its path params.

        The body cache is shared so a body read before routing isn't lost.
        """
        return replace(self, route=match.route, path_params=match.path_params)

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: dict[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            path_params={},
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            route=None,
            _receive=receive,
        )
