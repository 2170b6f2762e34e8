"""Orders — mediator request handlers exposed as JSON endpoints.

Each handler class becomes one or more HTTP endpoints. Request messages
are decoded from the JSON body, sent through the mediator, and the
handler's result comes back as JSON. Demonstrates:

- default ``POST /api/{RequestType}`` routes
- ``@http_get`` / ``@http_delete`` route annotations
- custom metadata (``RequiresApiKey``) read by a middleware
- ``HttpContextAware`` messages that see the HTTP request
- a mediator behavior wrapping every handler

Serve ``app`` with any ASGI server. List the routes with::

    cd examples/orders && courier routes app:app
"""

import logging
import threading
from dataclasses import dataclass, field

from courier import App, AppConfig, HttpContextAware, Mediator, Request, RequestHandler, Response
from courier.endpoints import endpoint_metadata, http_delete, http_get
from courier.middleware import Next
from courier.serialization import UInt8

logger = logging.getLogger("examples.orders")


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


@dataclass
class OrderLine:
    sku: str
    quantity: UInt8 = 1


@dataclass
class PlaceOrder:
    customer: str = ""
    lines: list[OrderLine] = field(default_factory=list)


@dataclass
class ListOrders:
    customer: str | None = None


@dataclass
class CancelOrder:
    id: int = 0


@dataclass
class WhoAmI(HttpContextAware):
    pass


@dataclass(frozen=True, slots=True)
class Order:
    id: int
    customer: str
    lines: tuple[OrderLine, ...]
    status: str = "open"


@dataclass(frozen=True, slots=True)
class RequiresApiKey:
    header: str = "x-api-key"


# ---------------------------------------------------------------------------
# In-memory storage
# ---------------------------------------------------------------------------

_orders: dict[int, Order] = {}
_next_id = 1
_lock = threading.Lock()


def _get_next_id() -> int:
    global _next_id
    with _lock:
        n = _next_id
        _next_id += 1
        return n


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


class PlaceOrderHandler(RequestHandler[PlaceOrder, Order]):
    async def handle(self, request: PlaceOrder) -> Order:
        if not request.customer:
            raise ValueError("An order needs a customer.")
        order = Order(_get_next_id(), request.customer, tuple(request.lines))
        with _lock:
            _orders[order.id] = order
        return order


class ListOrdersHandler(RequestHandler[ListOrders, list[Order]]):
    @http_get("/orders")
    def handle(self, request: ListOrders) -> list[Order]:
        with _lock:
            orders = list(_orders.values())
        if request.customer is not None:
            orders = [o for o in orders if o.customer == request.customer]
        return orders


class CancelOrderHandler(RequestHandler[CancelOrder, Order | None]):
    @http_delete("/orders")
    @endpoint_metadata(RequiresApiKey())
    def handle(self, request: CancelOrder) -> Order | None:
        with _lock:
            order = _orders.get(request.id)
            if order is None:
                return None
            cancelled = Order(order.id, order.customer, order.lines, status="cancelled")
            _orders[order.id] = cancelled
        return cancelled


class WhoAmIHandler(RequestHandler[WhoAmI, dict]):
    @http_get("/whoami")
    def handle(self, request: WhoAmI) -> dict:
        assert request.http_context is not None
        return {"client": request.http_context.client[0]}


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------


async def log_messages(message, next):
    """Mediator behavior: log every message type handled."""
    logger.info("handling %s", type(message).__name__)
    return await next(message)


app = App(
    AppConfig(base_path="/api"),
    mediator=Mediator(behaviors=[log_messages]),
)
app.add_handler_types([PlaceOrderHandler, ListOrdersHandler, CancelOrderHandler, WhoAmIHandler])
app.map_mediator()


async def require_api_key(request: Request, next: Next) -> Response:
    """Reject requests to routes carrying ``RequiresApiKey`` without the header."""
    rule = request.route.get_metadata(RequiresApiKey) if request.route else None
    if rule is not None and rule.header not in request.headers:
        return Response(f"Missing {rule.header} header", status=401)
    return await next(request)


app.add_middleware(require_api_key)


@app.error(ValueError)
def invalid_order(request: Request, exc: ValueError):
    return ({"error": str(exc)}, 422)
