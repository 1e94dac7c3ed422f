"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Turns a routing decision into a response.

=============================================================================
RESPONDERS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    OUTCOME → RESPONDER                              │
    ├──────────────┬──────────────────────────────────────────────────────┤
    │  FILE        │  200, body streamed from the file                    │
    │  INDEX       │  200, body streamed from <dir>/<index>               │
    │  LISTING     │  200, text/html, generated directory listing         │
    │  NOT_FOUND   │  404, text/html, page echoing the requested URL      │
    └──────────────┴──────────────────────────────────────────────────────┘

Routing and responding are separate steps, so a file can disappear
between the two (another process deletes it). Every responder treats
that as "not found": a failed open() or scandir() degrades to the 404
responder, it never propagates out of the worker.

=============================================================================
ACCESS LOG
=============================================================================

Each request produces exactly one line on the "brownhttpd.access" logger:

    GET '/a.txt' => 200
    GET '/my docs/' => 200
    GET '/missing' => 404

The URL is shown after "%20" decoding, the status is the one actually
sent (a FILE that vanished before open() logs 404).

=============================================================================
"""

import html
import logging
import os
from http import HTTPStatus

from ..http.mime_types import get_content_type
from ..http.response import HTTPResponse, ResponseBuilder
from ..http.router import Outcome, PathRouter, Route, decode_path
from .listing import render_listing, scan_directory


logger = logging.getLogger(__name__)
access_logger = logging.getLogger("brownhttpd.access")


NOT_FOUND_TEMPLATE = (
    "<!DOCTYPE html>\n"
    "<html>\n"
    "<head>\n"
    "<title>404 Not Found</title>\n"
    "</head>\n"
    "<body>\n"
    "<h1>Not found - {url}</h1>\n"
    "</body>\n"
    "</html>"
)


class StaticFileHandler:
    """
    Serves a directory tree: files, index files, listings and 404 pages.

    =========================================================================
    USAGE
    =========================================================================

        static = StaticFileHandler("/srv/www", index_file="index.html")

        response = static.handle("GET", "/docs/")
        response.status            # HTTPStatus.OK
        response.headers           # {"Content-Type": ..., "Content-Length": ...}

    The handler is stateless after construction; a single instance is
    shared by all worker threads.

    =========================================================================
    """

    def __init__(self, root_dir: str, index_file: str = "index.html"):
        """
        Args:
            root_dir: Served root. Absolute path; "/" after a chroot.
            index_file: File served in place of a directory listing.
        """
        self.root_dir = os.path.normpath(root_dir)
        self.index_file = index_file
        self.router = PathRouter(self.root_dir, index_file)

    def handle(self, method: str, url: str) -> HTTPResponse:
        """
        Route a request and build its response.

        Args:
            method: HTTP method, used for the access log only.
            url: Raw request path as sent by the client.
        """
        route = self.router.route(url)
        response = self.respond(route, url)
        access_logger.info(
            f"{method.upper()} '{decode_path(url)}' => {response.status.value}"
        )
        return response

    def respond(self, route: Route, url: str) -> HTTPResponse:
        """Dispatch a routing outcome to its responder."""
        if route.kind in (Outcome.FILE, Outcome.INDEX):
            return self.serve_file(route.path, url)
        if route.kind is Outcome.LISTING:
            return self.serve_listing(route.path, url)
        return self.not_found(url)

    def serve_file(self, path: str, url: str) -> HTTPResponse:
        """
        Stream a regular file.

        The file object is handed to the response; the request handler
        closes it once the body has been written.
        """
        try:
            fileobj = open(path, "rb")
        except OSError as e:
            logger.debug(f"Could not open {path}: {e}")
            return self.not_found(url)

        try:
            size = os.fstat(fileobj.fileno()).st_size
        except OSError:
            fileobj.close()
            return self.not_found(url)

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .content_type(get_content_type(path))
            .file(fileobj, size)
            .build())

    def serve_listing(self, path: str, url: str) -> HTTPResponse:
        """Render the listing of a directory without an index file."""
        try:
            entries = scan_directory(path, self.root_dir)
        except OSError as e:
            logger.debug(f"Could not list {path}: {e}")
            return self.not_found(url)

        return (ResponseBuilder()
            .status(HTTPStatus.OK)
            .html(render_listing(url, entries))
            .build())

    def not_found(self, url: str) -> HTTPResponse:
        """404 page echoing the URL exactly as it was requested."""
        return (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .html(NOT_FOUND_TEMPLATE.format(url=html.escape(url)))
            .build())
