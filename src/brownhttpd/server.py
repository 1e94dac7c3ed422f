"""
=============================================================================
FILE SERVER
=============================================================================

Wires the configuration, process setup, listener, thread pool and
static file handler together.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          FileServer                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   prepare()   daemonize → chdir(root) → chroot       (process-wide)│
    │       │                                                             │
    │       ▼                                                             │
    │   bind()      PooledTCPServer(0.0.0.0:7878 | [::1]:7878)           │
    │       │                                                             │
    │       ▼                                                             │
    │   serve_forever()                                                   │
    │       │                                                             │
    │       └──► accept ──► ThreadPool ──► FileRequestHandler            │
    │                                          │                          │
    │                                          ▼                          │
    │                                   StaticFileHandler                 │
    │                                   route() → respond()               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

prepare() and bind() are separate from serve_forever() so tests can run a
real server on a free port without daemonizing or changing the test
process's working directory.

=============================================================================
"""

import logging
import signal
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import PooledTCPServer, ThreadPool, process
from .core.process import StartupError
from .handlers import StaticFileHandler
from .http.handler import FileRequestHandler


logger = logging.getLogger(__name__)


class FileServer:
    """
    Static file HTTP server.

        config = ServerConfig(root="/srv/www", port=8000, threads=4)
        FileServer(config).run()    # Blocks until Ctrl+C / SIGTERM
    """

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Validated before anything else happens.

        Raises:
            ValueError: If the configuration is invalid.
        """
        config.validate()
        self.config = config

        # The served root can only change once, in prepare() after chroot
        self.root = config.root
        self.static = StaticFileHandler(self.root, config.index)

        self._pool = ThreadPool(workers=config.threads, queue_size=config.queue_size)
        self._tcp_server: Optional[PooledTCPServer] = None
        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """(host, port) actually bound; port is real even when config says 0."""
        if self._tcp_server is None:
            return (self.config.host, self.config.port)
        return self._tcp_server.server_address[:2]

    # =========================================================================
    # STARTUP
    # =========================================================================

    def prepare(self) -> None:
        """
        Process-wide setup, in the only order that works.

        Raises:
            StartupError: If daemonizing, changing directory or chrooting
                          fails.
        """
        if self.config.daemon:
            logger.info("Forking to background...")
            process.daemonize()

        process.change_dir(self.config.root)

        if self.config.chroot:
            process.confine(self.config.root)
            self.root = "/"
            self.static = StaticFileHandler(self.root, self.config.index)

        logger.info(f"Serving directory '{self.config.root}'")

    def bind(self) -> Tuple[str, int]:
        """
        Create and bind the listening socket.

        Returns:
            The bound (host, port).

        Raises:
            StartupError: If the socket cannot be bound.
        """
        host, port = self.config.host, self.config.port
        try:
            self._tcp_server = PooledTCPServer(
                (host, port),
                FileRequestHandler,
                self._pool,
                ipv6=self.config.ipv6,
            )
        except OSError as e:
            raise StartupError(f"Failed to bind to {host}:{port}: {e}") from e

        self._tcp_server.static = self.static

        bound_host, bound_port = self.address
        if self.config.ipv6:
            logger.info(f"Listening on http://[{bound_host}]:{bound_port}/")
        else:
            logger.info(f"Listening on http://{bound_host}:{bound_port}/")
        return bound_host, bound_port

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def serve_forever(self) -> None:
        """Start the workers and accept connections until shutdown()."""
        if self._tcp_server is None:
            self.bind()

        self._pool.start()
        try:
            self._tcp_server.serve_forever()
        finally:
            logger.debug(f"Thread pool stats: {self._pool.stats}")
            self._pool.shutdown(wait=True, timeout=5.0)
            self._tcp_server.server_close()

    def shutdown(self) -> None:
        """
        Stop serve_forever().

        Must be called from a thread other than the one serving.
        """
        if self._tcp_server is not None:
            self._tcp_server.shutdown()

    def run(self) -> None:
        """
        Prepare, bind and serve (blocking).

        Ctrl+C and SIGTERM both end in a clean shutdown.
        """
        setup_logging(self.config.level)
        self.prepare()
        self.bind()

        self._setup_signals()
        try:
            self.serve_forever()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._restore_signals()
            logger.info("Server stopped")

    # =========================================================================
    # SIGNALS
    # =========================================================================

    def _setup_signals(self) -> None:
        """
        Turn SIGTERM into a graceful shutdown.

        Signal handlers can only be installed from the main thread; when
        the server runs elsewhere (tests) this is a no-op.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
            # shutdown() waits for serve_forever() to return, which cannot
            # happen while this handler is running on the serving thread
            threading.Thread(target=self.shutdown, daemon=True).start()

        self._original_handlers[signal.SIGTERM] = signal.signal(
            signal.SIGTERM, shutdown_handler
        )

    def _restore_signals(self) -> None:
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()


def setup_logging(level: int = logging.INFO) -> None:
    """Configure logging for the command-line server."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("brownhttpd").setLevel(level)
