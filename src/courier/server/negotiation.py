"""Content negotiation — maps return values to Response objects.

Inspects the return value of a route endpoint and produces the
appropriate Response. isinstance-based dispatch, no magic, fully
predictable.
"""

import json as json_module
from typing import Any

from courier.http.response import JSON_MEDIA_TYPE, Response


def negotiate(value: Any) -> Response:
    """Convert an endpoint's return value to a Response.

    Dispatch order:

    1. ``Response``            -> pass through
    2. ``None``                -> 204, no body
    3. ``str``                 -> 200, text/plain
    4. ``bytes``               -> 200, application/octet-stream
    5. ``dict`` / ``list``     -> 200, application/json
    6. ``(value, int)``        -> negotiate value, override status
    7. ``(value, int, dict)``  -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case None:
            return Response(b"", status=204, content_type=None)
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return Response(
                body=json_module.dumps(value, separators=(",", ":")),
                content_type=JSON_MEDIA_TYPE,
            )
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return str, bytes, dict, list, None or Response."
            )
            raise TypeError(msg)
