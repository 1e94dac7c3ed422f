"""
=============================================================================
HTTP RESPONSE
=============================================================================

A small value object describing what should be sent back to the client,
plus a fluent builder for constructing it.

=============================================================================
WHO WRITES THE BYTES?
=============================================================================

The wire format (status line, header framing, CRLFs) belongs to the
standard library's BaseHTTPRequestHandler. Responders never touch a
socket; they return an HTTPResponse and the request handler serializes
it:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      RESPONSE LIFECYCLE                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Responder              FileRequestHandler         Client          │
    │   ─────────              ──────────────────         ──────          │
    │                                                                      │
    │   HTTPResponse(   ───►   send_response(status)                      │
    │     status=200,          send_header(...)                           │
    │     headers={...},       end_headers()                              │
    │     body=b"..." or       wfile.write(body)   ───►   bytes           │
    │     file=<fileobj>       or copyfileobj(file)                        │
    │   )                      file.close()                               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A response carries EITHER an in-memory body (listings, 404 pages) OR an
open file that is streamed to the client (served files). Streaming keeps
memory flat no matter how large the file is.

=============================================================================
"""

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import BinaryIO, Dict, Optional, Union


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Use ResponseBuilder for a more convenient way to construct responses.
    """

    status: HTTPStatus = HTTPStatus.OK                     # HTTP status code
    headers: Dict[str, str] = field(default_factory=dict)  # Response headers
    body: bytes = b""                                      # In-memory body
    file: Optional[BinaryIO] = None                        # Streamed body

    @property
    def content_length(self) -> int:
        """
        Length of the body in bytes.

        For streamed files the builder records the size from fstat() in the
        Content-Length header, so the file never has to be read to know it.
        """
        if "Content-Length" in self.headers:
            return int(self.headers["Content-Length"])
        return len(self.body)

    def close(self) -> None:
        """Release the streamed file, if any."""
        if self.file is not None:
            self.file.close()
            self.file = None


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

        response = (ResponseBuilder()
            .status(HTTPStatus.NOT_FOUND)
            .html("<h1>Not found</h1>")
            .build())
    """

    def __init__(self):
        self._status = HTTPStatus.OK
        self._headers: Dict[str, str] = {}
        self._body: bytes = b""
        self._file: Optional[BinaryIO] = None

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        """Set the HTTP status code."""
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """Add a single response header."""
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        """Set the Content-Type header."""
        return self.header("Content-Type", content_type)

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """
        Set the response body (raw bytes or string).

        Strings are encoded to UTF-8.
        """
        if isinstance(body, str):
            self._body = body.encode("utf-8")
        else:
            self._body = body
        self._file = None
        self._headers.pop("Content-Length", None)
        return self

    def html(self, html: str) -> "ResponseBuilder":
        """
        Set an HTML response body.

        Sets Content-Type to text/html with UTF-8 charset.
        """
        self.body(html)
        return self.content_type("text/html; charset=utf-8")

    def file(self, fileobj: BinaryIO, size: int) -> "ResponseBuilder":
        """
        Stream an open binary file as the body.

        Args:
            fileobj: File opened in binary mode. Ownership passes to the
                     response; the request handler closes it after writing.
            size: Number of bytes that will be sent (from fstat()).
        """
        self._file = fileobj
        self._body = b""
        return self.header("Content-Length", str(size))

    def build(self) -> HTTPResponse:
        """Build the final HTTPResponse object."""
        headers = dict(self._headers)
        headers.setdefault("Content-Length", str(len(self._body)))
        return HTTPResponse(
            status=self._status,
            headers=headers,
            body=self._body,
            file=self._file,
        )
