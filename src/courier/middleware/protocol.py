"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.

Middleware runs after routing, so ``request.route`` is set and the
annotations a handler's ``handle`` method carries are available through
``request.route.get_metadata(...)``.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from courier.http.request import Request
from courier.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for courier middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            elapsed = time.monotonic() - start
            return response.with_header("X-Time", f"{elapsed:.3f}")

        # Class middleware reading forwarded endpoint annotations
        class RequireHeader:
            async def __call__(self, request: Request, next: Next) -> Response:
                rule = request.route.get_metadata(RequiresHeader)
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
