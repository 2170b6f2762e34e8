"""Derive HTTP routes from mediator request handler types.

Runs once while the application is being set up. For each handler type:

1. Resolve ``(request_type, response_type)`` from its
   ``RequestHandler[...]`` base.
2. Read the annotations on its ``handle`` method.
3. Emit one route per ``HttpMethod`` annotation, or a single
   ``POST /<RequestTypeName>`` route when there are none.

Every route points at ``dispatch_to_mediator`` and carries the
``HandlerDescriptor``, an ``HttpMethodMetadata`` marker and the
remaining ``handle`` annotations as metadata.
"""

import logging
from collections.abc import Iterable

from courier.endpoints.annotations import HttpMethod, get_annotations
from courier.endpoints.dispatcher import dispatch_to_mediator
from courier.endpoints.metadata import HandlerDescriptor, HttpMethodMetadata
from courier.errors import ConfigurationError
from courier.mediator import request_handler_types
from courier.routing.route import Route

logger = logging.getLogger("courier.endpoints")


def derive_endpoints(handler_types: Iterable[type], base_path: str = "") -> list[Route]:
    """Build the routes for *handler_types*, in order.

    Every type is validated before any route is built, so a bad type
    raises ``ConfigurationError`` without producing partial output.
    """
    descriptors: list[HandlerDescriptor] = []
    for handler_type in handler_types:
        declared = request_handler_types(handler_type)
        if declared is None:
            name = getattr(handler_type, "__qualname__", repr(handler_type))
            msg = (
                f"{name} cannot be mapped to an endpoint: it does not subclass "
                "RequestHandler[Request, Response] with both types given."
            )
            raise ConfigurationError(msg)
        descriptors.append(HandlerDescriptor.for_handler(handler_type, *declared))

    routes: list[Route] = []
    for descriptor in descriptors:
        routes.extend(_routes_for(descriptor, base_path))
    return routes


def _routes_for(descriptor: HandlerDescriptor, base_path: str) -> list[Route]:
    annotations = get_annotations(getattr(descriptor.handler_type, "handle", None))
    bindings = [item for item in annotations if isinstance(item, HttpMethod)]
    forwarded = tuple(item for item in annotations if not isinstance(item, HttpMethod))
    if not bindings:
        bindings = [HttpMethod(("POST",))]

    default_template = "/" + descriptor.request_type.__name__
    routes = []
    for binding in bindings:
        path = join_path(base_path, binding.template or default_template)
        methods = frozenset(binding.methods)
        route = Route(
            path=path,
            handler=dispatch_to_mediator,
            methods=methods,
            name=descriptor.request_type.__name__,
            metadata=(descriptor, HttpMethodMetadata(methods), *forwarded),
        )
        logger.debug(
            "%s %s -> %s",
            ",".join(sorted(methods)),
            path,
            descriptor.handler_type.__qualname__,
        )
        routes.append(route)
    return routes


def join_path(base_path: str, template: str) -> str:
    """Prefix *template* with *base_path*, leaving exactly one slash between.

    ``join_path("/api/", "/CreateOrder")`` -> ``"/api/CreateOrder"``.
    An empty base path leaves the template as is (with a leading slash).
    """
    if not base_path:
        return template if template.startswith("/") else "/" + template
    return base_path.rstrip("/") + "/" + template.lstrip("/")
