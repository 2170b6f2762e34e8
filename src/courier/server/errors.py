"""Fault layer: turns exceptions raised while serving a request into Responses.

``HTTPError`` carries its own status. Anything else is a 500. Either way a
handler registered with ``@app.error()`` gets the first chance to answer,
looked up in this order:

1. the exact exception class
2. the status code
3. the exception's base classes, nearest first

so ``@app.error(CourierError)`` covers the whole courier hierarchy while a
more specific registration still wins.
"""

import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from courier._internal.invoke import invoke
from courier.errors import HTTPError
from courier.http.request import Request
from courier.http.response import Response
from courier.server.negotiation import negotiate

logger = logging.getLogger("courier.server")

type ErrorHandlers = dict[int | type, Callable[..., Any]]


def find_error_handler(
    error_handlers: ErrorHandlers,
    exc: Exception,
    status: int,
) -> Callable[..., Any] | None:
    """Return the registered handler for *exc*, or ``None``."""
    handler = error_handlers.get(type(exc)) or error_handlers.get(status)
    if handler is not None:
        return handler
    for cls in type(exc).__mro__[1:]:
        handler = error_handlers.get(cls)
        if handler is not None:
            return handler
    return None


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    status: int,
) -> Response:
    """Run *handler* and negotiate its result.

    Handlers take ``()``, ``(request)`` or ``(request, exc)``, sync or
    async. A plain 200 answer is given *status* instead.
    """
    args = (request, exc)[: len(inspect.signature(handler).parameters)]
    response = negotiate(await invoke(handler, *args))
    if response.status == 200:
        response = response.with_status(status)
    return response


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Answer an ``HTTPError`` (404, 405, ...)."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = find_error_handler(error_handlers, exc, exc.status)
    if handler is not None:
        return await call_error_handler(handler, request, exc, exc.status)

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"
    return Response(detail, status=exc.status, headers=exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    debug: bool,
) -> Response:
    """Answer an unexpected exception with a 500, logging the traceback."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = find_error_handler(error_handlers, exc, 500)
    if handler is not None:
        return await call_error_handler(handler, request, exc, 500)

    if debug:
        return Response("".join(traceback.format_exception(exc)), status=500)
    return Response("Internal Server Error", status=500)
