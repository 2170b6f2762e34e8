"""Route metadata attached by the endpoint deriver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from courier.endpoints.http_context import HttpContextAware
from courier.serialization import default_instance


@dataclass(frozen=True, slots=True)
class HandlerDescriptor:
    """What the dispatcher needs to know about a mediator endpoint.

    ``request_type`` and ``response_type`` are exactly the two type
    arguments of the handler's ``RequestHandler[...]`` base.
    ``context_aware`` is worked out once at startup.
    """

    handler_type: type
    request_type: type
    response_type: type
    context_aware: bool = False

    @classmethod
    def for_handler(
        cls, handler_type: type, request_type: type, response_type: type
    ) -> HandlerDescriptor:
        return cls(
            handler_type=handler_type,
            request_type=request_type,
            response_type=response_type,
            context_aware=isinstance(request_type, type)
            and issubclass(request_type, HttpContextAware),
        )

    def create_default(self) -> Any:
        """Build the message used when a request arrives without a body."""
        return default_instance(self.request_type)


@dataclass(frozen=True, slots=True)
class HttpMethodMetadata:
    """The HTTP methods a derived route accepts."""

    methods: frozenset[str]
