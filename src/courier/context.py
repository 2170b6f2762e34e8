"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task.
- ``mediator_var``: The mediator serving the current request.

Both are set by the handler pipeline and reset after each request.
Outside a request, accessing them raises ``LookupError``.

Thread safety:
    ``ContextVar`` is task-local under asyncio. No locks needed.
"""

from contextvars import ContextVar

from courier.http.request import Request
from courier.mediator import Sender

request_var: ContextVar[Request] = ContextVar("courier_request")
"""The current request. Set by the ASGI handler before dispatch."""

mediator_var: ContextVar[Sender] = ContextVar("courier_mediator")
"""The application's mediator. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_mediator() -> Sender:
    """Return the mediator serving the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return mediator_var.get()
