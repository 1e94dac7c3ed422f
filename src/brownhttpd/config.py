"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized, immutable configuration for the file server.

=============================================================================
WHY A FROZEN DATACLASS?
=============================================================================

Every worker thread reads the configuration (served root, index name)
while handling requests. If the object could change underneath them we
would need locks. A frozen dataclass is built once at startup, validated
once, and then shared by reference:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION LIFECYCLE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   argparse.Namespace                                                 │
    │        │                                                             │
    │        ▼                                                             │
    │   ServerConfig.from_args()   ← root made absolute here              │
    │        │                                                             │
    │        ▼                                                             │
    │   config.validate()          ← fail fast, before any fork/bind      │
    │        │                                                             │
    │        ▼                                                             │
    │   FileServer(config) ──► router, responders, workers (read-only)   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There are no environment variables and no configuration files; the
command line is the only source.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass, field


DEFAULT_PORT = 7878
DEFAULT_THREADS = 1
DEFAULT_INDEX = "index.html"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    CONTENT
    - root, index

    NETWORK
    - port, ipv6

    PROCESS
    - daemon, chroot

    THREADING
    - threads, queue_size

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root: str = field(default_factory=os.getcwd)
    """
    Directory tree exposed to clients.
    Always stored as an absolute path: the daemon step changes the working
    directory to "/" before the server changes into the root.
    """

    index: str = DEFAULT_INDEX
    """
    File name served in place of a listing when a directory contains it.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    port: int = DEFAULT_PORT
    """
    Port to listen on. 0 lets the OS pick a free port (used by tests).
    """

    ipv6: bool = False
    """
    Bind the IPv6 loopback (::1) instead of the IPv4 any-address (0.0.0.0).
    """

    # ─────────────────────────────────────────────────────────────────────
    # PROCESS
    # ─────────────────────────────────────────────────────────────────────

    daemon: bool = False
    """
    Detach into the background before binding the socket.
    """

    chroot: bool = False
    """
    Confine the process to the root after changing into it.
    Requires root privileges (CAP_SYS_CHROOT on Linux).
    """

    # ─────────────────────────────────────────────────────────────────────
    # THREADING
    # ─────────────────────────────────────────────────────────────────────

    threads: int = DEFAULT_THREADS
    """
    Number of worker threads. 1 means strictly sequential handling.
    """

    queue_size: int = 100
    """
    Accepted connections waiting for a worker. When the queue is full the
    accept loop blocks until a worker frees a slot.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"

    @classmethod
    def from_args(cls, args) -> "ServerConfig":
        """
        Create configuration from parsed command-line arguments.

        The served root defaults to the current working directory and is
        made absolute here, while relative paths still mean something.
        """
        root = args.path if args.path is not None else os.getcwd()
        return cls(
            root=os.path.abspath(root),
            index=args.index,
            port=args.port,
            ipv6=args.ipv6,
            daemon=args.daemon,
            chroot=args.chroot,
            threads=args.threads,
            log_level=args.log_level,
        )

    @property
    def host(self) -> str:
        """Address the listener binds to."""
        return "::1" if self.ipv6 else "0.0.0.0"

    @property
    def level(self) -> int:
        """Numeric logging level."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def validate(self) -> None:
        """
        Validate configuration values.

        =====================================================================
        FAIL-FAST PRINCIPLE
        =====================================================================

        Validation runs before daemonizing, so mistakes are reported on the
        terminal the user is looking at instead of vanishing into
        /dev/null together with the detached child.

        =====================================================================
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.threads < 1:
            raise ValueError("threads must be >= 1")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if not self.index or "/" in self.index:
            raise ValueError(f"Invalid index file name: {self.index!r}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        if not os.path.isabs(self.root):
            raise ValueError(f"root must be an absolute path: {self.root}")

        if not os.path.isdir(self.root):
            raise ValueError(f"Root directory does not exist: {self.root}")
