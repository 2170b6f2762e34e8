"""The endpoint shared by every route ``map_mediator()`` derives."""

import asyncio
import logging
from typing import Any

from courier._internal.invoke import invoke
from courier.context import get_mediator
from courier.endpoints.metadata import HandlerDescriptor
from courier.errors import ClientDisconnected, RequestBodyError
from courier.http.request import Request
from courier.http.response import JSON_MEDIA_TYPE, Response
from courier.serialization import decode, encode

logger = logging.getLogger("courier.endpoints")


async def dispatch_to_mediator(request: Request) -> Response:
    """Decode the body into the route's request type and send it.

    A missing, zero or invalid ``Content-Length`` sends a default instance.
    An undecodable body is answered with an empty 400 and never reaches
    the mediator. Anything the mediator raises propagates.
    """
    descriptor = request.route.get_metadata(HandlerDescriptor) if request.route else None
    if descriptor is None:
        msg = f"Route for {request.method} {request.path} has no HandlerDescriptor."
        raise RuntimeError(msg)

    body = await request.body()
    if (request.content_length or 0) > 0:
        try:
            message = decode(body, descriptor.request_type)
        except RequestBodyError as exc:
            logger.debug("Bad request body for %s: %s", descriptor.request_type.__name__, exc)
            return Response(b"", status=400, content_type=None)
    else:
        message = descriptor.create_default()

    if descriptor.context_aware:
        message.http_context = request

    result = await _send_until_disconnect(request, message)

    return Response(encode(result), content_type=JSON_MEDIA_TYPE)


async def _send_until_disconnect(request: Request, message: Any) -> Any:
    """Send *message*, cancelling the send if the client goes away first."""
    mediator = get_mediator()
    sending = asyncio.ensure_future(invoke(mediator.send, message))
    watching = asyncio.ensure_future(request.wait_for_disconnect())
    try:
        done, _ = await asyncio.wait((sending, watching), return_when=asyncio.FIRST_COMPLETED)
    finally:
        for task in (sending, watching):
            if not task.done():
                task.cancel()

    if sending in done:
        return sending.result()

    # Let the cancelled send unwind before reporting the disconnect
    await asyncio.gather(sending, return_exceptions=True)
    msg = f"Client disconnected during {type(message).__name__}"
    raise ClientDisconnected(msg)
