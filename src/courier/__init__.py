"""Courier — HTTP endpoints derived from mediator request handlers.

Declare handlers against typed messages, and courier exposes each one
as a JSON endpoint::

    from dataclasses import dataclass

    from courier import App, RequestHandler
    from courier.endpoints import http_get

    @dataclass
    class GetOrder:
        id: int = 0

    @dataclass
    class Order:
        id: int
        status: str

    app = App()

    @app.handler
    class GetOrderHandler(RequestHandler[GetOrder, Order]):
        async def handle(self, request: GetOrder) -> Order:
            return Order(request.id, "open")

    app.map_mediator("/api")        # POST /api/GetOrder

Run it under any ASGI server (``uvicorn app:app``).
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "CourierError",
    "HTTPError",
    "HandlerDescriptor",
    "HttpContextAware",
    "Mediator",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "RequestHandler",
    "Response",
    "Sender",
    "get_mediator",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import courier`` fast while providing a clean top-level API.
    """
    if name == "App":
        from courier.app import App

        return App

    if name == "AppConfig":
        from courier.config import AppConfig

        return AppConfig

    if name == "Request":
        from courier.http.request import Request

        return Request

    if name == "Response":
        from courier.http.response import Response

        return Response

    if name in ("Mediator", "RequestHandler", "Sender"):
        from courier import mediator as _mediator

        return getattr(_mediator, name)

    if name in ("HandlerDescriptor", "HttpContextAware"):
        from courier import endpoints as _endpoints

        return getattr(_endpoints, name)

    if name in ("Middleware", "Next"):
        from courier.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("get_mediator", "get_request"):
        from courier import context as _ctx

        return getattr(_ctx, name)

    if name in ("CourierError", "ConfigurationError", "HTTPError", "MethodNotAllowed", "NotFound"):
        from courier import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
