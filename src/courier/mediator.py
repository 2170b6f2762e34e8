"""In-process mediator — routes a message to the one handler registered for it.

A handler declares what it accepts and what it produces through its
generic base::

    class CreateOrderHandler(RequestHandler[CreateOrder, OrderCreated]):
        async def handle(self, request: CreateOrder) -> OrderCreated:
            ...

    mediator = Mediator([CreateOrderHandler()])
    created = await mediator.send(CreateOrder(customer="ada"))

Behaviors wrap every send, outermost first, the same way middleware
wraps endpoints::

    async def timing(message, next):
        start = time.monotonic()
        try:
            return await next(message)
        finally:
            log.info("%s took %.3fs", type(message).__name__, time.monotonic() - start)

    mediator.add_behavior(timing)

Anything with an ``async send(message)`` method satisfies ``Sender`` and
can stand in for ``Mediator`` at the HTTP boundary.
"""

import logging
import types
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Protocol, TypeVar, get_args, get_origin, runtime_checkable

from courier._internal.invoke import invoke
from courier.errors import ConfigurationError, HandlerNotFound

logger = logging.getLogger("courier.mediator")

# The rest of the pipeline, as seen by a behavior
type NextHandler = Callable[[Any], Awaitable[Any]]

# A pipeline behavior: ``async (message, next) -> result``
type Behavior = Callable[[Any, NextHandler], Awaitable[Any]]


class RequestHandler[TRequest, TResponse](ABC):
    """Handles one request message type and produces one response type.

    ``handle`` may be ``def`` or ``async def``.
    """

    @abstractmethod
    def handle(self, request: TRequest) -> TResponse | Awaitable[TResponse]:
        """Process *request* and return the response message."""


@runtime_checkable
class Sender(Protocol):
    """Anything that can send a message and await its response."""

    async def send(self, request: Any) -> Any: ...


def request_handler_types(handler_type: object) -> tuple[type, type] | None:
    """Return ``(request_type, response_type)`` declared by *handler_type*.

    Looks through the original (subscripted) bases, substituting type
    variables through generic intermediate classes, so both of these
    resolve to ``(CreateOrder, OrderCreated)``::

        class A(RequestHandler[CreateOrder, OrderCreated]): ...

        class Base[T](RequestHandler[T, OrderCreated]): ...
        class B(Base[CreateOrder]): ...

    Returns ``None`` when *handler_type* is not a class or does not close
    both type parameters of ``RequestHandler``.
    """
    if not isinstance(handler_type, type):
        return None
    return _resolve(handler_type, {})


def _resolve(cls: type, substitutions: dict[Any, Any]) -> tuple[type, type] | None:
    for base in types.get_original_bases(cls):
        origin = get_origin(base) or base
        args = tuple(substitutions.get(arg, arg) for arg in get_args(base))
        if origin is RequestHandler:
            if len(args) == 2 and not any(isinstance(arg, TypeVar) for arg in args):
                return args[0], args[1]
            continue
        if isinstance(origin, type) and issubclass(origin, RequestHandler):
            params = getattr(origin, "__type_params__", ()) or getattr(
                origin, "__parameters__", ()
            )
            found = _resolve(origin, dict(zip(params, args, strict=False)))
            if found is not None:
                return found
    return None


class Mediator:
    """Registry of request handlers keyed by request type, plus behaviors.

    Mutable while the application is being set up; read-only afterwards,
    so concurrent ``send`` calls share it without locking.
    """

    __slots__ = ("_behaviors", "_handlers")

    def __init__(
        self,
        handlers: Iterable[RequestHandler[Any, Any] | type] = (),
        behaviors: Iterable[Behavior] = (),
    ) -> None:
        self._handlers: dict[type, RequestHandler[Any, Any]] = {}
        self._behaviors: list[Behavior] = list(behaviors)
        for handler in handlers:
            self.register(handler)

    def register(self, handler: RequestHandler[Any, Any] | type) -> None:
        """Register a handler instance, or a handler class to instantiate.

        Raises ``ConfigurationError`` if *handler* is not a
        ``RequestHandler[Req, Resp]`` or its request type already has one.
        """
        if isinstance(handler, type):
            declared = request_handler_types(handler)
            if declared is None:
                msg = f"{handler.__qualname__} is not a RequestHandler[Request, Response]."
                raise ConfigurationError(msg)
            handler = handler()
        else:
            declared = request_handler_types(type(handler))
            if declared is None:
                msg = f"{handler!r} is not a RequestHandler[Request, Response]."
                raise ConfigurationError(msg)

        request_type = declared[0]
        existing = self._handlers.get(request_type)
        if existing is not None:
            msg = (
                f"{request_type.__qualname__} is already handled by "
                f"{type(existing).__qualname__}; cannot also register "
                f"{type(handler).__qualname__}."
            )
            raise ConfigurationError(msg)
        self._handlers[request_type] = handler
        logger.debug("Registered %s for %s", type(handler).__qualname__, request_type.__qualname__)

    def add_behavior(self, behavior: Behavior) -> None:
        """Append a pipeline behavior. The first added runs outermost."""
        self._behaviors.append(behavior)

    def handler_for(self, request_type: type) -> RequestHandler[Any, Any]:
        """Return the handler for *request_type*, falling back along its MRO."""
        for cls in request_type.__mro__:
            handler = self._handlers.get(cls)
            if handler is not None:
                return handler
        msg = f"No handler registered for {request_type.__qualname__}."
        raise HandlerNotFound(msg)

    async def send(self, request: Any) -> Any:
        """Run *request* through the behaviors and its handler."""
        if request is None:
            msg = "Cannot send None through the mediator."
            raise TypeError(msg)

        handler = self.handler_for(type(request))

        async def call_handler(message: Any) -> Any:
            return await invoke(handler.handle, message)

        pipeline: NextHandler = call_handler
        for behavior in reversed(self._behaviors):
            pipeline = _wrap(behavior, pipeline)
        return await pipeline(request)


def _wrap(behavior: Behavior, next_handler: NextHandler) -> NextHandler:
    async def step(message: Any) -> Any:
        return await invoke(behavior, message, next_handler)

    return step
