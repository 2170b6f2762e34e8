"""Middleware — request/response wrappers around routed endpoints."""

from courier.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
