"""
=============================================================================
POOLED TCP SERVER
=============================================================================

The listening socket plus the hand-off from the accept loop to the
thread pool.

=============================================================================
WHY NOT ThreadingHTTPServer?
=============================================================================

socketserver.ThreadingMixIn starts a brand new thread for every
connection, with no upper bound. We want a FIXED number of workers
pulling from a single queue, so we override process_request() instead:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    serve_forever() internals                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   acceptor thread                    worker threads                 │
    │   ───────────────                    ──────────────                 │
    │   select() / accept()                                               │
    │        │                                                            │
    │        ▼                                                            │
    │   process_request(sock, addr)                                       │
    │        │  pool.submit(...)  ──queue──►  process_request_task()     │
    │        │                                   finish_request()        │
    │        ▼                                      └─ handler class      │
    │   back to accept()                         shutdown_request()       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The bounded queue gives natural backpressure: when every worker is busy
and the queue is full, submit() blocks and the acceptor stops accepting
until a slot frees up.

=============================================================================
SOCKET OPTIONS
=============================================================================

SO_REUSEADDR (allow_reuse_address) lets the server restart immediately
instead of failing with "Address already in use" while old connections
sit in TIME_WAIT.

=============================================================================
"""

import logging
import socket
import socketserver
from typing import Tuple

from .thread_pool import ThreadPool


logger = logging.getLogger(__name__)


class PooledTCPServer(socketserver.TCPServer):
    """
    TCPServer whose connections are handled by a fixed-size ThreadPool.

    Usage:
        pool = ThreadPool(workers=4)
        server = PooledTCPServer(("0.0.0.0", 7878), Handler, pool)
        pool.start()
        server.serve_forever()
    """

    allow_reuse_address = True
    request_queue_size = 128   # listen() backlog

    def __init__(
        self,
        address: Tuple[str, int],
        handler_class,
        pool: ThreadPool,
        ipv6: bool = False,
    ):
        """
        Create the socket and bind it.

        Args:
            address: (host, port) to bind.
            handler_class: socketserver request handler class.
            pool: Thread pool that will run the handler.
            ipv6: Use AF_INET6 instead of AF_INET.

        Raises:
            OSError: If binding fails (port in use, permission denied).
        """
        # TCPServer.__init__ reads address_family to create the socket
        self.address_family = socket.AF_INET6 if ipv6 else socket.AF_INET
        self.pool = pool
        super().__init__(address, handler_class)

    def process_request(self, request, client_address):
        """Queue the connection for a worker (runs in the acceptor)."""
        try:
            submitted = self.pool.submit(
                self.process_request_task,
                args=(request, client_address),
            )
        except RuntimeError:
            # Pool is shutting down
            submitted = False

        if not submitted:
            logger.warning(f"Rejecting connection from {client_address[0]}")
            self.shutdown_request(request)

    def process_request_task(self, request, client_address):
        """Handle one connection start to finish (runs in a worker)."""
        try:
            self.finish_request(request, client_address)
        except Exception:
            self.handle_error(request, client_address)
        finally:
            self.shutdown_request(request)

    def handle_error(self, request, client_address):
        logger.exception(f"Error handling connection from {client_address[0]}")
