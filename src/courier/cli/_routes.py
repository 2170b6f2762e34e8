"""``courier routes`` — list registered routes.

Loads an App (directly, from a factory, or by mapping request handler
types) and prints every route with its methods, path, name and handler.
"""

import argparse
import sys

from courier.cli._resolve import load_app
from courier.endpoints.metadata import HandlerDescriptor
from courier.errors import ConfigurationError
from courier.routing.route import Route


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes for a courier app.

    Loads ``args.target``, freezes the resulting App, and prints
    a table of METHOD, PATH, NAME and HANDLER.
    """
    try:
        routes = load_app(args.target, args.base_path).routes
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    if not routes:
        print("No routes registered.")
        return

    rows = [
        (", ".join(sorted(route.methods)), route.path, route.name or "", _handler_name(route))
        for route in routes
    ]
    headings = ("METHOD", "PATH", "NAME", "HANDLER")
    widths = [
        max(len(heading), *(len(row[i]) for row in rows))
        for i, heading in enumerate(headings[:3])
    ]

    fmt = "  ".join(f"{{:<{width}}}" for width in widths) + "  {}"
    print(fmt.format(*headings))
    sep_len = sum(widths) + 6 + max(len(row[3]) for row in rows)
    print("-" * min(sep_len, 80))
    for row in rows:
        print(fmt.format(*row))


def _handler_name(route: Route) -> str:
    descriptor = route.get_metadata(HandlerDescriptor)
    if descriptor is not None:
        return descriptor.handler_type.__qualname__
    return getattr(route.handler, "__name__", str(route.handler))
