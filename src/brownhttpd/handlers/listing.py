"""
=============================================================================
DIRECTORY LISTING
=============================================================================

Generates the HTML page shown for a directory without an index file.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   /sub/                                         ← <title>, <h1>     │
    │                                                                      │
    │   ..                                            ← parent link       │
    │   images/                                       ← directory row     │
    │   notes.txt                           1024      ← file row + size   │
    │   ────────────────────────────────────────                          │
    │   Generated on Mon Oct 19 09:31:00 2026 UTC     ← footer            │
    └─────────────────────────────────────────────────────────────────────┘

Entries are sorted by name so the same directory renders the same way on
every platform (os.scandir() order is filesystem-dependent).

=============================================================================
SECURITY NOTE
=============================================================================

File names are attacker-controlled whenever users can upload files. Every
name and path is HTML-escaped before it is interpolated, so a file called
"<script>.txt" shows up as text instead of running in the browser.

Names that are not valid UTF-8 are listed with U+FFFD in place of the bad
bytes. Their links do not lead back to the file.

=============================================================================
LINKS
=============================================================================

hrefs are the plain path, HTML-escaped but not percent-encoded. The server
only decodes "%20", so a space in a name round-trips either way. Names
containing "#", "?" or a literal "%20" produce links that do not resolve
back to the entry.

=============================================================================
"""

import html
import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import PurePosixPath
from typing import Iterable, List, Optional


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirEntry:
    """
    One row of a listing.

    Attributes:
        name: Entry name as found on disk.
        href: Absolute URL path of the entry ("/sub/b.txt").
        is_dir: True for directories.
        size: Size in bytes; None for directories.
    """
    name: str
    href: str
    is_dir: bool
    size: Optional[int] = None


def displayable(name: str) -> str:
    """
    Make a file system name safe to encode as UTF-8.

    On POSIX, bytes that are not valid UTF-8 come back from os.scandir()
    as lone surrogates ("caf\\udce9.txt"), which str.encode("utf-8")
    refuses. They are replaced with U+FFFD so the page can still be sent.
    """
    return name.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def scan_directory(path: str, root: str) -> List[DirEntry]:
    """
    Read a directory's immediate children.

    Entries whose metadata cannot be read (removed mid-scan, dangling
    symlinks) are skipped instead of failing the whole listing. An
    unreadable directory raises OSError to the caller.

    Args:
        path: Directory to scan.
        root: Served root, used to build absolute hrefs.
    """
    entries = []
    with os.scandir(path) as it:
        for entry in it:
            try:
                is_dir = entry.is_dir()
                size = None if is_dir else entry.stat().st_size
            except OSError as e:
                logger.debug(f"Skipping {entry.path}: {e}")
                continue

            relative = os.path.relpath(entry.path, root).replace(os.sep, "/")
            entries.append(DirEntry(
                name=displayable(entry.name),
                href="/" + displayable(relative),
                is_dir=is_dir,
                size=size,
            ))
    return entries


def parent_path(request_path: str) -> str:
    """
    URL of the parent directory.

        /sub/deeper/  →  /sub
        /sub/         →  /
        /             →  ..
    """
    path = PurePosixPath(request_path)
    if path.parent == path:
        return ".."
    return str(path.parent)


def format_timestamp(now: Optional[datetime] = None) -> str:
    """asctime()-style UTC timestamp, e.g. 'Mon Oct 19 09:31:00 2026'."""
    if now is None:
        return time.asctime(time.gmtime())
    return time.asctime(now.utctimetuple())


def _render_row(entry: DirEntry) -> str:
    href = html.escape(entry.href)
    name = html.escape(entry.name)
    if entry.is_dir:
        return f'<tr><td><a href="{href}">{name}/</a></td><td></td></tr>\n'
    return (
        f'<tr><td><a href="{href}">{name}</a></td>'
        f'<td align="right">   {entry.size}</td></tr>\n'
    )


def render_listing(
    request_path: str,
    entries: Iterable[DirEntry],
    now: Optional[datetime] = None,
) -> str:
    """
    Render a complete listing page.

    Args:
        request_path: URL path as requested; used for the title and to
                      compute the parent link.
        entries: Directory entries, in any order.
        now: Generation time (defaults to the current time).

    Returns:
        The full HTML document.
    """
    title = html.escape(request_path)
    rows = "".join(
        _render_row(entry) for entry in sorted(entries, key=lambda e: e.name)
    )

    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        f"<title>{title}</title>\n"
        "</head>\n"
        "<body>\n"
        f"<h1>{title}</h1>\n"
        "<tt><pre>\n"
        "<table>\n"
        f'<tr><td><a href="{html.escape(parent_path(request_path))}">..</a></td></tr>\n'
        f"{rows}"
        "</table>\n"
        "</pre></tt>\n"
        "<hr>\n"
        f"Generated on {format_timestamp(now)} UTC\n"
        "</body>\n"
        "</html>"
    )
