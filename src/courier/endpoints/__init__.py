"""Mediator endpoints: derive routes from handler types and dispatch to them.

Public API::

    from courier.endpoints import (
        derive_endpoints,
        dispatch_to_mediator,
        HandlerDescriptor,
        HttpContextAware,
        http_get, http_post, http_put, http_delete, http_patch,
        http_head, http_options, http_methods, endpoint_metadata,
    )
"""

from courier.endpoints.annotations import (
    HttpMethod,
    endpoint_metadata,
    get_annotations,
    http_delete,
    http_get,
    http_head,
    http_methods,
    http_options,
    http_patch,
    http_post,
    http_put,
)
from courier.endpoints.deriver import derive_endpoints, join_path
from courier.endpoints.dispatcher import dispatch_to_mediator
from courier.endpoints.http_context import HttpContextAware
from courier.endpoints.metadata import HandlerDescriptor, HttpMethodMetadata

__all__ = [
    "HandlerDescriptor",
    "HttpContextAware",
    "HttpMethod",
    "HttpMethodMetadata",
    "derive_endpoints",
    "dispatch_to_mediator",
    "endpoint_metadata",
    "get_annotations",
    "http_delete",
    "http_get",
    "http_head",
    "http_methods",
    "http_options",
    "http_patch",
    "http_post",
    "http_put",
    "join_path",
]
