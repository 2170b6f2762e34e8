"""Fixtures for the runnable examples.

Every example directory holds an ``app.py`` exposing ``app``. The file is
executed afresh for each test, so module-level stores such as the order
book start out empty and a frozen route table never leaks between tests.
"""

import runpy
from pathlib import Path

import pytest

from courier import App
from courier.testing import TestClient


@pytest.fixture
def example_app(request: pytest.FixtureRequest) -> App:
    """The ``app`` defined by the ``app.py`` beside the requesting test."""
    namespace = runpy.run_path(str(Path(request.path).with_name("app.py")))
    app = namespace.get("app")
    if not isinstance(app, App):
        pytest.fail(f"{request.path.parent.name}/app.py does not define a courier App")
    return app


@pytest.fixture
async def client(example_app: App):
    """A started ``TestClient`` for the example; lifespan runs around the test."""
    async with TestClient(example_app) as started:
        yield started


@pytest.fixture
def route_table(example_app: App) -> list[tuple[str, str]]:
    """Sorted ``(method, path)`` pairs for every route the example derived."""
    return sorted((method, route.path) for route in example_app.routes for method in route.methods)
