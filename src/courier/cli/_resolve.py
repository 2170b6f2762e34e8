"""Find the application ``courier routes`` should describe.

The target is ``module`` or ``module:attribute`` and may name:

- an ``App``, or a zero-argument factory returning one;
- a ``RequestHandler`` subclass, or a list or tuple of them;
- a module without an ``app`` attribute, meaning every request handler
  class defined in it.

Handler types are mapped onto a fresh ``App`` so their derived endpoints
can be listed before any application wires them up.
"""

import importlib
from collections.abc import Iterable
from types import ModuleType

from courier.app import App
from courier.config import AppConfig
from courier.errors import ConfigurationError
from courier.mediator import RequestHandler, request_handler_types


def load_app(target: str, base_path: str = "") -> App:
    """Resolve *target* to an App, raising ``ConfigurationError`` if it can't.

    *base_path* prefixes the routes of handler types mapped here; an App
    found in the module keeps its own configuration.
    """
    module_name, _, attr_name = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        msg = f"Cannot import {module_name!r}: {exc}"
        raise ConfigurationError(msg) from exc

    if not attr_name:
        if not hasattr(module, "app"):
            return _preview(_handlers_defined_in(module), target, base_path)
        attr_name = "app"

    try:
        obj = getattr(module, attr_name)
    except AttributeError as exc:
        msg = f"Module {module_name!r} has no attribute {attr_name!r}"
        raise ConfigurationError(msg) from exc

    if isinstance(obj, App):
        return obj
    if _is_handler(obj):
        return _preview([obj], target, base_path)
    if isinstance(obj, (list, tuple)) and obj and all(_is_handler(item) for item in obj):
        return _preview(obj, target, base_path)
    if callable(obj):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"App factory {target!r} raised {type(exc).__name__}: {exc}"
            raise ConfigurationError(msg) from exc
        if isinstance(obj, App):
            return obj

    msg = (
        f"{target!r} resolved to {type(obj).__name__}; expected a courier App, "
        "an App factory, or request handler types"
    )
    raise ConfigurationError(msg)


def _is_handler(obj: object) -> bool:
    return (
        isinstance(obj, type)
        and issubclass(obj, RequestHandler)
        and request_handler_types(obj) is not None
    )


def _handlers_defined_in(module: ModuleType) -> list[type]:
    # Imported handlers belong to the module that defines them
    return [
        obj
        for obj in vars(module).values()
        if _is_handler(obj) and obj.__module__ == module.__name__
    ]


def _preview(handler_types: Iterable[type], target: str, base_path: str) -> App:
    handler_types = tuple(handler_types)
    if not handler_types:
        msg = f"{target!r} defines no request handlers"
        raise ConfigurationError(msg)
    app = App(AppConfig(base_path=base_path, handler_types=handler_types))
    app.map_mediator()
    return app
