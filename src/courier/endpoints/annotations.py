"""Decorators that annotate a handler's ``handle`` method.

HTTP method annotations decide which routes ``map_mediator()`` derives;
any other annotation is forwarded untouched as route metadata::

    class GetOrderHandler(RequestHandler[GetOrder, Order]):
        @http_get("/orders/{id:int}")
        @http_get()                      # also GET /GetOrder
        @endpoint_metadata(CacheFor(seconds=30))
        async def handle(self, request: GetOrder) -> Order:
            ...

A ``handle`` method without any HTTP method annotation is exposed as a
single ``POST /<RequestTypeName>`` route.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

_ATTRIBUTE = "_courier_annotations"


@dataclass(frozen=True, slots=True)
class HttpMethod:
    """Expose the annotated handler under *methods* at *template*.

    An empty template means ``/`` + the request type's name.
    """

    methods: tuple[str, ...]
    template: str = ""


def endpoint_metadata(*items: object) -> Callable[[Any], Any]:
    """Attach arbitrary objects to a ``handle`` method.

    Items keep source order: the topmost decorator's items come first.
    """

    def decorator(func: Any) -> Any:
        existing: tuple[object, ...] = getattr(func, _ATTRIBUTE, ())
        func._courier_annotations = (*items, *existing)
        return func

    return decorator


def http_methods(methods: Iterable[str], template: str = "") -> Callable[[Any], Any]:
    """Expose the handler under several HTTP methods on one template."""
    normalized = tuple(dict.fromkeys(m.upper() for m in methods))
    if not normalized:
        msg = "http_methods() needs at least one HTTP method."
        raise ValueError(msg)
    return endpoint_metadata(HttpMethod(normalized, template))


def http_get(template: str = "") -> Callable[[Any], Any]:
    """Expose the handler under ``GET``."""
    return http_methods(("GET",), template)


def http_post(template: str = "") -> Callable[[Any], Any]:
    """Expose the handler under ``POST``."""
    return http_methods(("POST",), template)


def http_put(template: str = "") -> Callable[[Any], Any]:
    """Expose the handler under ``PUT``."""
    return http_methods(("PUT",), template)


def http_patch(template: str = "") -> Callable[[Any], Any]:
    """Expose the handler under ``PATCH``."""
    return http_methods(("PATCH",), template)


def http_delete(template: str = "") -> Callable[[Any], Any]:
    """Expose the handler under ``DELETE``."""
    return http_methods(("DELETE",), template)


def http_head(template: str = "") -> Callable[[Any], Any]:
    return http_methods(("HEAD",), template)


def http_options(template: str = "") -> Callable[[Any], Any]:
    return http_methods(("OPTIONS",), template)


def get_annotations(func: Any) -> tuple[object, ...]:
    """Return every object attached to *func*, in source order."""
    return getattr(func, _ATTRIBUTE, ())
