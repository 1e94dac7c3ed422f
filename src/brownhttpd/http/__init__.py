"""
=============================================================================
HTTP LAYER
=============================================================================

Wire-level HTTP (request line, headers, framing) is handled by the
standard library's http.server. This package holds what sits on top of
it:

    ┌─────────────────────────────────────────────────────────────────────┐
    │ ROUTER (router.py)                                                  │
    │ URL path → Route(FILE | INDEX | LISTING | NOT_FOUND, path)          │
    ├─────────────────────────────────────────────────────────────────────┤
    │ RESPONSE (response.py)                                              │
    │ HTTPResponse value object + fluent ResponseBuilder                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │ HANDLER (handler.py)                                                │
    │ BaseHTTPRequestHandler subclass that writes an HTTPResponse         │
    ├─────────────────────────────────────────────────────────────────────┤
    │ MIME TYPES (mime_types.py)                                          │
    │ Extension → Content-Type                                            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .mime_types import get_content_type, get_mime_type
from .response import HTTPResponse, ResponseBuilder
from .router import Outcome, PathRouter, Route, decode_path

__all__ = [
    # Routing
    "Outcome",
    "PathRouter",
    "Route",
    "decode_path",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",

    # MIME types
    "get_mime_type",
    "get_content_type",
]
