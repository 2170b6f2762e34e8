"""Opt-in access to the HTTP request from inside a mediator message."""

from courier.http.request import Request


class HttpContextAware:
    """Mixin for request messages that want to see the HTTP request.

    The dispatcher sets ``http_context`` before the message is sent, so
    the handler can read headers, path params or the client address
    while the mediator stays HTTP-agnostic::

        @dataclass
        class GetOrder(HttpContextAware):
            include_lines: bool = False

        class GetOrderHandler(RequestHandler[GetOrder, Order]):
            @http_get("/orders/{id:int}")
            async def handle(self, request: GetOrder) -> Order:
                order_id = int(request.http_context.path_params["id"])

    The attribute is not a dataclass field: it is neither decoded from
    the body nor compared. Messages using it must not be frozen or slotted.
    """

    http_context: Request | None = None
