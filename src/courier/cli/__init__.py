"""Courier CLI — inspect the endpoints an application exposes.

Entry point registered as ``courier`` in ``pyproject.toml``::

    [project.scripts]
    courier = "courier.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``courier`` command."""
    parser = argparse.ArgumentParser(
        prog="courier",
        description="Courier: HTTP endpoints for mediator request handlers.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- courier routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument(
        "target",
        help="module:attribute naming an App, an App factory, or handler types (e.g. myapp:app)",
    )
    routes_parser.add_argument(
        "--base-path",
        default="",
        help="Prefix for routes derived from handler types (default: none)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from courier.cli._routes import run_routes

        run_routes(args)
