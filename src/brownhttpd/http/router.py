"""
=============================================================================
PATH ROUTER
=============================================================================

Decides what a request URL refers to on disk. There are no registered
routes: the filesystem under the served root IS the route table.

=============================================================================
ROUTING DECISION TREE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   GET /my%20docs/                                                    │
    │        │                                                             │
    │        ▼                                                             │
    │   decode_path()          "%20" → " "  (nothing else is decoded)     │
    │        │                                                             │
    │        ▼                                                             │
    │   join onto root         /srv/www/my docs/                          │
    │        │                                                             │
    │        ├── escapes root?  ───────────────────────► NOT_FOUND        │
    │        │                                                             │
    │        ├── stat() fails?  ───────────────────────► NOT_FOUND        │
    │        │                                                             │
    │        ├── directory?                                               │
    │        │      ├── <dir>/index.html is a file ───► INDEX             │
    │        │      └── otherwise ──────────────────► LISTING            │
    │        │                                                             │
    │        ├── regular file? ────────────────────────► FILE             │
    │        │                                                             │
    │        └── anything else (fifo, socket, ...) ───► NOT_FOUND        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PERCENT-DECODING
=============================================================================

Only "%20" is turned back into a space. "%41" stays "%41", so a file
literally named "%41.txt" is reachable and "A.txt" is not reachable as
"/%41.txt". Listing links are emitted unencoded for the same reason: they
must survive this decoder unchanged.

=============================================================================
PATH TRAVERSAL
=============================================================================

A raw request line such as "GET /../../etc/passwd" would join to a path
outside the root. The joined path is normalised lexically and rejected
(NOT_FOUND) if it leaves the root. Normalisation is lexical on purpose:
symlinks that live inside the root keep working even when they point
elsewhere, exactly as plain joining allowed before.

=============================================================================
"""

import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from typing import Optional


logger = logging.getLogger(__name__)


class Outcome(Enum):
    """What a request path resolved to."""
    FILE = "file"            # Regular file, serve its bytes
    INDEX = "index"          # Directory with an index file, serve the index
    LISTING = "listing"      # Directory without an index file, list it
    NOT_FOUND = "not_found"  # Missing, unreadable or not a file/directory


@dataclass(frozen=True)
class Route:
    """
    Result of routing one request path.

    Example:
        URL:    /docs/
        Result: Route(kind=Outcome.INDEX, path="/srv/www/docs/index.html")
    """
    kind: Outcome
    path: Optional[str] = None   # Filesystem target (None for NOT_FOUND)


NOT_FOUND = Route(Outcome.NOT_FOUND)


def decode_path(url: str) -> str:
    """Undo the one escape browsers reliably produce in file names."""
    return url.replace("%20", " ")


class PathRouter:
    """
    Maps URL paths to filesystem outcomes under a fixed root.

    The router holds no mutable state, so one instance is shared by every
    worker thread.

        router = PathRouter("/srv/www", index="index.html")
        router.route("/a.txt")   # Route(Outcome.FILE, "/srv/www/a.txt")
        router.route("/sub/")    # Route(Outcome.LISTING, "/srv/www/sub")
        router.route("/nope")    # Route(Outcome.NOT_FOUND)
    """

    def __init__(self, root: str, index: str = "index.html"):
        self.root = os.path.normpath(root)
        self.index = index

    def resolve(self, url: str) -> Optional[str]:
        """
        Turn a request URL into a filesystem path under the root.

        Returns None if the decoded path escapes the root.
        """
        relative = decode_path(url).lstrip("/")
        full_path = os.path.normpath(os.path.join(self.root, relative))

        if full_path != self.root and not full_path.startswith(
            self.root.rstrip(os.sep) + os.sep
        ):
            logger.warning(f"Path traversal attempt: {url!r}")
            return None

        return full_path

    def route(self, url: str) -> Route:
        """
        Classify a request URL.

        Every lookup failure collapses into NOT_FOUND; nothing raised by
        the filesystem escapes this method.
        """
        full_path = self.resolve(url)
        if full_path is None:
            return NOT_FOUND

        try:
            mode = os.stat(full_path).st_mode
        except (OSError, ValueError):
            # Missing, permission denied, symlink loop, embedded NUL byte
            return NOT_FOUND

        if stat.S_ISDIR(mode):
            index_path = os.path.join(full_path, self.index)
            if os.path.isfile(index_path):
                return Route(Outcome.INDEX, index_path)
            return Route(Outcome.LISTING, full_path)

        if stat.S_ISREG(mode):
            return Route(Outcome.FILE, full_path)

        return NOT_FOUND
