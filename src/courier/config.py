"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(base_path="/api", handler_types=(CreateOrderHandler,))
    """

    # Render tracebacks in 500 responses
    debug: bool = False

    # Prefix for every mediator endpoint when map_mediator() gets no argument
    base_path: str = ""

    # Request handler classes exposed over HTTP, in registration order
    handler_types: tuple[type, ...] = ()
