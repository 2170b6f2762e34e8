"""Invoke helper — call sync or async callables uniformly.

Route endpoints, request handlers and mediator behaviors can all be
``def`` or ``async def``. Any code that calls one of them goes through
this helper so the sync/async check lives in exactly one place.
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
