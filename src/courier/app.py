"""Courier application class.

Mutable during setup (routes, handler types, middleware, hooks).
Frozen at runtime when ``__call__()`` is first invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from courier._internal.asgi import Receive, Scope, Send
from courier._internal.types import Endpoint, ErrorHandler
from courier.config import AppConfig
from courier.endpoints.deriver import derive_endpoints
from courier.mediator import Mediator, Sender
from courier.middleware.protocol import Middleware
from courier.routing.route import Route
from courier.routing.router import Router
from courier.server.handler import handle_request

logger = logging.getLogger("courier.server")


@dataclass(slots=True)
class _MediatorMount:
    """A ``map_mediator()`` call waiting to be derived at freeze time."""

    base_path: str


class App:
    """The courier application.

    Mutable during setup (routes, handler types, middleware).
    Frozen at runtime when ``__call__()`` is first invoked.

    Mediator endpoints are derived from the registered handler types::

        app = App(AppConfig(base_path="/api"))

        @app.handler
        class CreateOrderHandler(RequestHandler[CreateOrder, OrderCreated]):
            async def handle(self, request: CreateOrder) -> OrderCreated: ...

        app.map_mediator()          # POST /api/CreateOrder

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the app, even if several ASGI workers call
        ``__call__()`` concurrently on first request.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_handler_types",
        "_mediator",
        "_middleware",
        "_middleware_list",
        "_pending",
        # Compiled state (populated by _freeze)
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        mediator: Sender | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._mediator: Sender = mediator if mediator is not None else Mediator()
        self._handler_types: list[type] = []
        self._pending: list[Route | _MediatorMount] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()

        self.add_handler_types(self.config.handler_types)

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Endpoint], Endpoint]:
        """Register a plain endpoint via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name, shown by ``courier routes``.
        """

        def decorator(func: Endpoint) -> Endpoint:
            self._check_not_frozen()
            self._pending.append(
                Route(
                    path=path,
                    handler=func,
                    methods=frozenset(m.upper() for m in (methods or ["GET"])),
                    name=name,
                )
            )
            return func

        return decorator

    # -- Mediator endpoints --

    @property
    def mediator(self) -> Sender:
        """The mediator every derived endpoint sends through."""
        return self._mediator

    @property
    def handler_types(self) -> tuple[type, ...]:
        """Handler types registered so far, in registration order."""
        return tuple(self._handler_types)

    def add_handler_types(self, handler_types: Iterable[type]) -> None:
        """Register request handler classes for ``map_mediator()``.

        With the built-in ``Mediator`` each class is also instantiated and
        registered with it. A custom mediator is expected to know its
        handlers already.
        """
        self._check_not_frozen()
        for handler_type in handler_types:
            if isinstance(self._mediator, Mediator):
                self._mediator.register(handler_type)
            self._handler_types.append(handler_type)

    def handler[T: type](self, cls: T) -> T:
        """Register a request handler class via decorator."""
        self.add_handler_types((cls,))
        return cls

    def map_mediator(self, base_path: str | None = None) -> None:
        """Expose every registered handler type as HTTP endpoints.

        Routes are derived when the app freezes, from all handler types
        registered by then. *base_path* defaults to ``config.base_path``.

        Each call derives its own set of routes: mapping twice produces
        duplicate routes, which fail as ambiguous when requested.
        """
        self._check_not_frozen()
        self._pending.append(
            _MediatorMount(self.config.base_path if base_path is None else base_path)
        )

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        before the server begins accepting HTTP requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown,
        after the server stops accepting new requests.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Introspection --

    @property
    def routes(self) -> list[Route]:
        """Every compiled route in registration order. Freezes the app."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router.routes

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            mediator=self._mediator,
            debug=self.config.debug,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server. A configuration error fails the startup.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock. Raises
        ``ConfigurationError`` for handler types or paths that cannot be
        mapped, leaving the app unfrozen.
        """
        # 1. Compile route table, deriving mediator endpoints in place
        router = Router()
        for pending in self._pending:
            if isinstance(pending, _MediatorMount):
                for route in derive_endpoints(self._handler_types, pending.base_path):
                    router.add(route)
            else:
                router.add(pending)
        router.compile()

        # 2. Capture middleware as immutable tuple
        self._router = router
        self._middleware = tuple(self._middleware_list)
        self._frozen = True
        logger.debug("Compiled %d routes", len(router.routes))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, handlers, and middleware before the first request."
            )
            raise RuntimeError(msg)
