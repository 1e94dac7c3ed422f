"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Everything that turns a request path into content:

    static.py   StaticFileHandler: route, then file / index / listing / 404
    listing.py  Directory scanning and the HTML listing page

=============================================================================
"""

from .listing import DirEntry, render_listing, scan_directory
from .static import StaticFileHandler

__all__ = [
    "StaticFileHandler",
    "DirEntry",
    "render_listing",
    "scan_directory",
]
