"""
=============================================================================
PROCESS SETUP: DAEMONIZE, CHDIR, CHROOT
=============================================================================

Process-wide steps that happen once, before the listener is bound.

=============================================================================
ORDER MATTERS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       STARTUP SEQUENCE                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. daemonize()     fork, setsid, fork, stdio → /dev/null          │
    │                      └── the CHILD binds the socket later, so the   │
    │                          listener belongs to the surviving process  │
    │                                                                      │
    │   2. change_dir()    chdir(root)                                    │
    │                      └── daemonize() moved us to "/", so the root   │
    │                          must already be absolute                   │
    │                                                                      │
    │   3. confine()       chroot(root)                                   │
    │                      └── after chdir, so "." is inside the jail     │
    │                      └── failure is FATAL: never serve unconfined   │
    │                          when confinement was requested             │
    │                                                                      │
    │   4. bind + serve                                                    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
THE DOUBLE FORK
=============================================================================

    parent ──fork──► child ──setsid──► session leader ──fork──► daemon
      │                                     │
      exit(0)                               exit(0)

The first fork returns control to the shell. setsid() detaches from the
controlling terminal. The second fork makes sure the daemon is not a
session leader, so it can never re-acquire a terminal.

=============================================================================
"""

import logging
import os
import sys


logger = logging.getLogger(__name__)


class StartupError(Exception):
    """A fatal error before the server starts accepting requests."""


def daemonize(umask: int = 0o027) -> None:
    """
    Detach from the terminal and continue in the background.

    Only the grandchild returns from this function; both intermediate
    processes exit with status 0.

    Raises:
        StartupError: If a fork fails.
    """
    _fork_and_exit_parent("first")

    os.setsid()

    _fork_and_exit_parent("second")

    os.chdir("/")
    os.umask(umask)
    _redirect_stdio()


def _fork_and_exit_parent(which: str) -> None:
    try:
        pid = os.fork()
    except OSError as e:
        raise StartupError(f"Daemonizing failed! {which} fork: {e}") from e

    if pid > 0:
        # Skip atexit handlers and buffered output owned by the child
        os._exit(0)


def _redirect_stdio() -> None:
    """Point stdin, stdout and stderr at /dev/null."""
    sys.stdout.flush()
    sys.stderr.flush()

    devnull = os.open(os.devnull, os.O_RDWR)
    try:
        for fd in (0, 1, 2):
            os.dup2(devnull, fd)
    finally:
        if devnull > 2:
            os.close(devnull)


def change_dir(path: str) -> None:
    """
    Make the served root the working directory.

    Raises:
        StartupError: If the directory cannot be entered.
    """
    try:
        os.chdir(path)
    except OSError as e:
        raise StartupError(f"Could not change root to '{path}'!") from e


def confine(path: str) -> None:
    """
    Restrict the visible filesystem to `path`.

    Requires root privileges. After this call "/" means `path`.

    Raises:
        StartupError: If chroot() fails for any reason.
    """
    try:
        os.chroot(path)
        os.chdir("/")
    except (OSError, AttributeError) as e:
        # AttributeError: os.chroot does not exist on this platform
        raise StartupError(f"Chrooting failed: {e}") from e

    logger.info(f"Chrooted to '{path}'")
