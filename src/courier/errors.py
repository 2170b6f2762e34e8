"""Courier exception hierarchy.

Shared across the router, the endpoint deriver, the dispatcher and the
mediator so every module raises and catches the same types.
"""

from dataclasses import dataclass


class CourierError(Exception):
    """Base for all courier-specific errors."""


class ConfigurationError(CourierError):
    """Raised when app or endpoint configuration is invalid.

    Always surfaces during setup (``App.map_mediator()``, ``Mediator.register()``,
    route compilation) and is never retried.
    """


class RequestBodyError(CourierError):
    """The request body could not be turned into the declared message type.

    The dispatcher answers both subclasses with ``400 Bad Request`` and an
    empty body.
    """


class MalformedRequestError(RequestBodyError):
    """The body is not valid JSON."""


class TypeCoercionError(RequestBodyError):
    """The body is valid JSON but a value does not fit its declared type.

    ``path`` locates the offending value, e.g. ``("lines", 2, "quantity")``.
    """

    def __init__(self, message: str, path: tuple[str | int, ...] = ()) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        if self.path:
            location = ".".join(str(part) for part in self.path)
            return f"{location}: {self.args[0]}"
        return str(self.args[0])


class HandlerNotFound(CourierError):  # noqa: N818
    """The mediator has no handler registered for a message type."""


class AmbiguousMatch(CourierError):  # noqa: N818
    """More than one route is registered for the same path and method.

    Happens when ``map_mediator()`` is called twice with overlapping
    handler types.
    """


class ClientDisconnected(CourierError):  # noqa: N818
    """The client went away before the response could be produced."""


@dataclass(eq=False)
class HTTPError(CourierError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Carries an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Method not allowed. Allowed methods: {allow_value}",
            headers=(("Allow", allow_value),),
        )
