"""
=============================================================================
BROWNHTTPD - Minimal Static File HTTP Server
=============================================================================

Serves a directory tree over HTTP: files as-is, directories through their
index file or a generated listing, everything else as a 404 page.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    brownhttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (brownhttpd, python -m brownhttpd)
    ├── server.py            # FileServer: bootstrap and lifecycle
    ├── config.py            # ServerConfig frozen dataclass
    ├── completions.py       # bash / zsh / fish completion scripts
    ├── core/                # Process and networking plumbing
    │   ├── process.py       # daemonize, chdir, chroot
    │   ├── socket_server.py # Listener feeding the thread pool
    │   └── thread_pool.py   # Fixed-size worker pool
    ├── http/                # HTTP-facing pieces on top of http.server
    │   ├── router.py        # URL path → FILE / INDEX / LISTING / NOT_FOUND
    │   ├── response.py      # HTTPResponse + ResponseBuilder
    │   ├── handler.py       # BaseHTTPRequestHandler subclass
    │   └── mime_types.py    # Content-Type detection
    └── handlers/
        ├── static.py        # Responders for each routing outcome
        └── listing.py       # Directory listing page

=============================================================================
QUICK START
=============================================================================

    from brownhttpd import FileServer, ServerConfig

    FileServer(ServerConfig(root="/srv/www", port=8000, threads=4)).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import FileServer

__all__ = ["FileServer", "ServerConfig", "__version__"]
