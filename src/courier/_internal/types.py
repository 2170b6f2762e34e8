"""Shared type aliases used across courier modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route endpoint: receives the request and/or path params by name
Endpoint: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
