"""
=============================================================================
REQUEST HANDLER
=============================================================================

The bridge between the standard library's HTTP machinery and our static
file handler.

BaseHTTPRequestHandler already knows how to read a request line and
headers, reject malformed requests with 400, and answer methods it has no
do_<METHOD> for with 501. Routing ignores the method: GET and the other
common methods are all answered from the file system, HEAD without a body.
We write the HTTPResponse our StaticFileHandler produced.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

protocol_version stays at HTTP/1.0, so the connection is closed after
each response. A worker therefore handles exactly one request per task
and never parks on an idle keep-alive connection while other clients
wait in the queue.

=============================================================================
WRITE FAILURES
=============================================================================

A client that disconnects mid-transfer raises BrokenPipeError or
ConnectionResetError while we write. That is logged as a warning and the
worker moves on to the next connection; one bad client does not stop the
server.

=============================================================================
"""

import logging
import shutil
import socket
from http.server import BaseHTTPRequestHandler

from .. import __version__
from .response import HTTPResponse


logger = logging.getLogger(__name__)


class FileRequestHandler(BaseHTTPRequestHandler):
    """
    Handles one connection; the server attribute must expose `static`
    (a StaticFileHandler).
    """

    server_version = f"brownhttpd/{__version__}"
    protocol_version = "HTTP/1.0"

    def do_GET(self):
        self._serve(send_body=True)

    def do_HEAD(self):
        self._serve(send_body=False)

    do_POST = do_PUT = do_DELETE = do_PATCH = do_OPTIONS = do_GET

    def _serve(self, send_body: bool) -> None:
        response = self.server.static.handle(self.command, self.path)
        try:
            self.write_response(response, send_body)
        except (ConnectionError, socket.timeout) as e:
            logger.warning(
                f"Failed to send response to {self.address_string()}: {e}"
            )
            self.close_connection = True
        finally:
            response.close()

    def write_response(self, response: HTTPResponse, send_body: bool = True) -> None:
        """Serialize an HTTPResponse onto the connection."""
        self.send_response(response.status)
        for name, value in response.headers.items():
            self.send_header(name, value)
        self.end_headers()

        if not send_body:
            return

        if response.file is not None:
            shutil.copyfileobj(response.file, self.wfile)
        else:
            self.wfile.write(response.body)

    def log_message(self, format, *args):
        # The access line is emitted by StaticFileHandler; keep the stdlib's
        # own stderr log out of the way unless debugging.
        logger.debug(f"{self.address_string()} - {format % args}")
