"""ASGI request pipeline: routing, middleware, negotiation and sending."""
