"""Tests for courier.routing.router: matching the routes derived from handlers."""

from dataclasses import dataclass

import pytest

from courier.endpoints import derive_endpoints, http_delete, http_get, http_methods
from courier.errors import AmbiguousMatch, ConfigurationError, MethodNotAllowed, NotFound
from courier.mediator import RequestHandler
from courier.routing.route import Route
from courier.routing.router import Router, parse_path


@dataclass
class PlaceOrder:
    customer: str = ""


@dataclass
class GetOrder:
    id: int = 0


@dataclass
class FindOrder:
    slug: str = ""


@dataclass
class RecentOrders:
    pass


@dataclass
class RemoveLines:
    order_id: str = ""


@dataclass
class CancelOrder:
    order_id: int = 0


@dataclass
class Download:
    rest: str = ""


class PlaceOrderHandler(RequestHandler[PlaceOrder, dict]):
    def handle(self, request: PlaceOrder) -> dict:
        return {}


class GetOrderHandler(RequestHandler[GetOrder, dict]):
    @http_get("/orders/{id:int}")
    def handle(self, request: GetOrder) -> dict:
        return {}


class FindOrderHandler(RequestHandler[FindOrder, dict]):
    @http_get("/orders/{slug}")
    def handle(self, request: FindOrder) -> dict:
        return {}


class RecentOrdersHandler(RequestHandler[RecentOrders, list]):
    @http_get("/orders/recent")
    def handle(self, request: RecentOrders) -> list:
        return []


class RemoveLinesHandler(RequestHandler[RemoveLines, None]):
    @http_delete("/orders/{order_id}/lines")
    def handle(self, request: RemoveLines) -> None:
        return None


class CancelOrderHandler(RequestHandler[CancelOrder, None]):
    @http_methods(["DELETE", "PATCH"], "/orders/{order_id:int}")
    def handle(self, request: CancelOrder) -> None:
        return None


class DownloadHandler(RequestHandler[Download, bytes]):
    @http_get("/files/{rest:path}")
    def handle(self, request: Download) -> bytes:
        return b""


def _router(*handler_types: type, base_path: str = "") -> Router:
    router = Router()
    for route in derive_endpoints(handler_types, base_path):
        router.add(route)
    router.compile()
    return router


class TestParsePath:
    def test_converters(self) -> None:
        segments = parse_path("/orders/{id:int}/lines/{sku}/{rest:path}")

        assert [(s.param_name, s.param_type) for s in segments if s.is_param] == [
            ("id", "int"),
            ("sku", "str"),
            ("rest", "path"),
        ]

    def test_root_has_no_segments(self) -> None:
        assert parse_path("/") == []

    def test_rejects_flask_style_param(self) -> None:
        with pytest.raises(ConfigurationError, match=r"<param>.*\{param\}"):
            parse_path("/orders/<id>")

    def test_rejects_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="unknown converter 'uuid'"):
            parse_path("/orders/{id:uuid}")


class TestDefaultRoutes:
    def test_post_at_request_type_name(self) -> None:
        router = _router(PlaceOrderHandler, base_path="/api")

        match = router.match("POST", "/api/PlaceOrder/")

        assert match.route.name == "PlaceOrder"
        assert match.path_params == {}

    def test_default_route_only_accepts_post(self) -> None:
        with pytest.raises(MethodNotAllowed) as exc_info:
            _router(PlaceOrderHandler).match("GET", "/PlaceOrder")

        assert dict(exc_info.value.headers)["Allow"] == "POST"

    def test_same_handler_mapped_twice_is_ambiguous(self) -> None:
        router = Router()
        for route in derive_endpoints([GetOrderHandler, GetOrderHandler]):
            router.add(route)
        router.compile()

        with pytest.raises(AmbiguousMatch, match="matches 2 routes: GetOrder, GetOrder"):
            router.match("GET", "/orders/7")


class TestParamNamesPerRoute:
    def test_each_route_keeps_its_own_names(self) -> None:
        router = _router(GetOrderHandler, RemoveLinesHandler)

        assert router.match("GET", "/orders/42").path_params == {"id": "42"}
        assert router.match("DELETE", "/orders/42/lines").path_params == {"order_id": "42"}

    def test_each_route_keeps_its_own_converter(self) -> None:
        router = _router(GetOrderHandler, RemoveLinesHandler)

        match = router.match("DELETE", "/orders/abc/lines")

        assert match.route.name == "RemoveLines"
        assert match.path_params == {"order_id": "abc"}
        with pytest.raises(NotFound):
            router.match("GET", "/orders/abc")

    def test_method_picks_between_templates_at_same_depth(self) -> None:
        router = _router(GetOrderHandler, CancelOrderHandler)

        assert router.match("GET", "/orders/7").path_params == {"id": "7"}
        assert router.match("PATCH", "/orders/7").path_params == {"order_id": "7"}

    def test_allow_lists_methods_of_every_matching_template(self) -> None:
        router = _router(GetOrderHandler, CancelOrderHandler)

        with pytest.raises(MethodNotAllowed) as exc_info:
            router.match("POST", "/orders/7")

        assert dict(exc_info.value.headers)["Allow"] == "DELETE, GET, PATCH"


class TestSpecificity:
    def test_literal_beats_params(self) -> None:
        router = _router(FindOrderHandler, GetOrderHandler, RecentOrdersHandler)

        assert router.match("GET", "/orders/recent").route.name == "RecentOrders"

    def test_int_beats_str(self) -> None:
        router = _router(FindOrderHandler, GetOrderHandler)

        assert router.match("GET", "/orders/42").route.name == "GetOrder"
        assert router.match("GET", "/orders/abc").path_params == {"slug": "abc"}

    def test_equal_templates_are_ambiguous(self) -> None:
        router = Router()
        router.add(Route("/orders/{id}", _noop, frozenset({"GET"}), name="ById"))
        router.add(Route("/orders/{key}", _noop, frozenset({"GET"}), name="ByKey"))
        router.compile()

        with pytest.raises(AmbiguousMatch, match="ById, ByKey"):
            router.match("GET", "/orders/1")

    def test_catch_all_is_last_resort(self) -> None:
        router = _router(DownloadHandler)

        match = router.match("GET", "/files/2024/05/orders.csv")

        assert match.path_params == {"rest": "2024/05/orders.csv"}
        with pytest.raises(NotFound):
            router.match("GET", "/files")


class TestRouterLifecycle:
    def test_unknown_path(self) -> None:
        with pytest.raises(NotFound) as exc_info:
            _router(GetOrderHandler).match("GET", "/invoices/1")

        assert exc_info.value.status == 404

    def test_add_after_compile_raises(self) -> None:
        router = _router(GetOrderHandler)

        with pytest.raises(RuntimeError, match="Cannot add routes after compilation"):
            router.add(Route("/late", _noop, frozenset({"GET"})))

    def test_routes_kept_in_registration_order(self) -> None:
        routes = derive_endpoints([GetOrderHandler, RemoveLinesHandler, GetOrderHandler])
        router = Router()
        for route in routes:
            router.add(route)

        assert [r.name for r in router.routes] == ["GetOrder", "RemoveLines", "GetOrder"]


def _noop() -> None:
    return None
