"""ASGI handler — translates ASGI scope/messages to courier types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, routes them, runs middleware around the
matched endpoint, and sends the Response back through ASGI send().
"""

import inspect
import logging
from collections.abc import Callable
from contextvars import Token
from typing import Any

from courier._internal.asgi import Receive, Scope, Send
from courier._internal.invoke import invoke
from courier.context import mediator_var, request_var
from courier.errors import ClientDisconnected, HTTPError
from courier.http.request import Request
from courier.http.response import Response
from courier.mediator import Sender
from courier.middleware.protocol import Next
from courier.routing.router import Router
from courier.server.errors import handle_http_error, handle_internal_error
from courier.server.negotiation import negotiate
from courier.server.sender import send_response

logger = logging.getLogger("courier.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    mediator: Sender,
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    # Set context vars (reset after dispatch)
    token: Token[Request] = request_var.set(request)
    mediator_token = mediator_var.set(mediator)

    try:
        match = router.match(request.method, request.path)
        request = request.with_match(match)
        request_var.set(request)

        # Wrap middleware around the matched endpoint
        handler: Next = _invoke_endpoint
        for mw in reversed(middleware):
            outer = handler

            async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> Response:
                return await invoke(_mw, req, _next)

            handler = make_next

        response = await handler(request)

    except ClientDisconnected as exc:
        logger.debug("%s %s dropped: %s", request.method, request.path, exc)
        return
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        mediator_var.reset(mediator_token)
        request_var.reset(token)

    await send_response(response, send)


async def _invoke_endpoint(request: Request) -> Response:
    """Call the routed endpoint and negotiate its return value."""
    assert request.route is not None
    endpoint = request.route.handler
    kwargs = _build_endpoint_kwargs(endpoint, request)
    result = await invoke(endpoint, **kwargs)
    return negotiate(result)


def _build_endpoint_kwargs(endpoint: Callable[..., Any], request: Request) -> dict[str, Any]:
    """Inspect the endpoint signature and build kwargs.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name, converted to the annotated type if possible)
    """
    sig = inspect.signature(endpoint, eval_str=True)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name in request.path_params:
            value = request.path_params[name]
            if param.annotation is not inspect.Parameter.empty:
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
