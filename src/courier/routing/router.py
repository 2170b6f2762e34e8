"""Compiled router with trie-based path matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the app freezes.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from courier.errors import AmbiguousMatch, ConfigurationError, MethodNotAllowed, NotFound
from courier.routing.route import PathSegment, Route, RouteMatch

# Regex for each supported ``{name:converter}`` segment type
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "path": r".+",
}


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{rest:path}" -> [..., PathSegment("{rest:path}", param_type="path")]

    Raises ``ConfigurationError`` for Flask-style ``<param>`` segments and
    unknown converters.
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("<") and part.endswith(">"):
            msg = (
                f"Route {path!r} uses <param> syntax. "
                "Courier templates use {param} or {param:int}."
            )
            raise ConfigurationError(msg)
        if part.startswith("{") and part.endswith("}"):
            param_name, _, param_type = part[1:-1].partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = f"Route {path!r} uses unknown converter {param_type!r}."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


@dataclass(slots=True)
class _Node:
    """A trie node. Mutable until the router compiles."""

    children: dict[str, _Node] = field(default_factory=dict)
    # Param and catch-all edges keyed by (name, converter), so routes that
    # spell the same segment differently each keep their own names.
    params: dict[tuple[str, str], _ParamEdge] = field(default_factory=dict)
    catch_alls: dict[str, _Node] = field(default_factory=dict)
    # Every route registered here, keyed by HTTP method. A list, because
    # duplicate registration is allowed and only detected when matched.
    routes: dict[str, list[Route]] = field(default_factory=dict)


@dataclass(slots=True)
class _ParamEdge:
    name: str
    converter: str
    regex: re.Pattern[str]
    node: _Node


# Lower ranks win when several templates match the same path
_STATIC_RANK = 0
_CONVERTER_RANK: dict[str, int] = {"int": 1, "float": 1, "str": 2, "path": 3}


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.add(Route("/orders/{id:int}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/orders/42")

    When several templates match a path, the one serving the method with
    the most specific segments wins: literal text beats ``int``/``float``,
    which beat ``str``, which beats ``path``. Two routes tied on that
    ranking for the same method are ambiguous.
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _Node()
        self._routes: list[Route] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            name = seg.param_name or ""
            if seg.is_param and seg.param_type == "path":
                node = node.catch_alls.setdefault(name, _Node())
                break
            if seg.is_param:
                edge = node.params.get((name, seg.param_type))
                if edge is None:
                    regex = re.compile(f"^{CONVERTERS[seg.param_type]}$")
                    edge = _ParamEdge(name, seg.param_type, regex, _Node())
                    node.params[name, seg.param_type] = edge
                node = edge.node
            else:
                node = node.children.setdefault(seg.value, _Node())

        for method in route.methods:
            node.routes.setdefault(method, []).append(route)
        self._routes.append(route)

    @property
    def routes(self) -> list[Route]:
        """Every registered route in registration order, duplicates included."""
        return list(self._routes)

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        Raises ``AmbiguousMatch`` if several routes claim the path and method.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        matches = list(self._walk(self._root, parts, 0, {}, ()))
        if not matches:
            raise NotFound(f"No route matches {method} {path!r}")

        serving = [
            (rank, params, node.routes[method])
            for node, params, rank in matches
            if method in node.routes
        ]
        if not serving:
            allowed = frozenset(m for node, _, _ in matches for m in node.routes)
            raise MethodNotAllowed(allowed)

        best = min(rank for rank, _, _ in serving)
        candidates = [
            (route, params) for rank, params, routes in serving if rank == best for route in routes
        ]
        if len(candidates) > 1:
            names = ", ".join(route.name or route.path for route, _ in candidates)
            msg = f"{method} {path!r} matches {len(candidates)} routes: {names}"
            raise AmbiguousMatch(msg)
        route, params = candidates[0]
        return RouteMatch(route=route, path_params=params)

    def _walk(
        self,
        node: _Node,
        parts: list[str],
        index: int,
        params: dict[str, str],
        rank: tuple[int, ...],
    ) -> Iterator[tuple[_Node, dict[str, str], tuple[int, ...]]]:
        """Yield every node holding routes that the remaining parts reach."""
        if index == len(parts):
            if node.routes:
                yield node, params, rank
            return

        part = parts[index]

        child = node.children.get(part)
        if child is not None:
            yield from self._walk(child, parts, index + 1, params, (*rank, _STATIC_RANK))

        for edge in node.params.values():
            if edge.regex.match(part):
                yield from self._walk(
                    edge.node,
                    parts,
                    index + 1,
                    {**params, edge.name: part},
                    (*rank, _CONVERTER_RANK[edge.converter]),
                )

        remaining = "/".join(parts[index:])
        for name, target in node.catch_alls.items():
            if target.routes:
                yield target, {**params, name: remaining}, (*rank, _CONVERTER_RANK["path"])
