"""Route and RouteMatch frozen dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``metadata`` is an ordered tuple of arbitrary objects attached at
    registration time. Courier itself only looks for a few of them
    (the mediator ``HandlerDescriptor``); everything else is carried
    along for middleware to consume.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
    metadata: tuple[object, ...] = ()

    def get_metadata[T](self, kind: type[T]) -> T | None:
        """Return the last metadata item that is an instance of *kind*."""
        for item in reversed(self.metadata):
            if isinstance(item, kind):
                return item
        return None

    def get_ordered_metadata[T](self, kind: type[T]) -> list[T]:
        """Return every metadata item that is an instance of *kind*, in order."""
        return [item for item in self.metadata if isinstance(item, kind)]


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
