"""
=============================================================================
BROWNHTTPD CLI ENTRY POINT
=============================================================================

    # Serve the current directory on port 7878
    brownhttpd

    # Serve ./public on port 8000 with 4 worker threads
    brownhttpd ./public --port 8000 --threads 4

    # Run in the background, confined to /srv/www (needs root)
    sudo brownhttpd /srv/www --daemon --chroot

    # IPv6 loopback only
    brownhttpd --ipv6

    # Shell completions (prints a script, does not start the server)
    brownhttpd --completions bash

Also runnable as `python -m brownhttpd`.

=============================================================================
EXIT CODES
=============================================================================

    0   clean shutdown (Ctrl+C, SIGTERM) or completion script printed
    1   bad arguments or any startup failure (bind, daemonize, chroot)

=============================================================================
"""

import argparse
import sys

from . import __version__
from .completions import SHELLS, generate
from .config import DEFAULT_INDEX, DEFAULT_PORT, DEFAULT_THREADS, LOG_LEVELS, ServerConfig
from .server import FileServer


PROG = "brownhttpd"


class CLIParser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on bad input instead of 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _number(label: str):
    def parse(value: str) -> int:
        try:
            return int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"{label} must be a number!")
    return parse


def build_parser() -> CLIParser:
    parser = CLIParser(
        prog=PROG,
        description="Minimal static file HTTP server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  brownhttpd                          # Serve the current directory
  brownhttpd ./public -p 8000         # Custom root and port
  brownhttpd -t 4                     # 4 worker threads
  brownhttpd --completions zsh        # Print zsh completions
        """
    )

    parser.add_argument(
        "path",
        metavar="PATH",
        nargs="?",
        default=None,
        help="Directory to serve (default: current directory)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--port", "-p",
        type=_number("Port"),
        default=DEFAULT_PORT,
        metavar="PORT",
        help=f"Port to listen on (default: {DEFAULT_PORT})"
    )

    parser.add_argument(
        "--ipv6",
        action="store_true",
        help="Listen on IPv6 localhost (::1) instead of 0.0.0.0"
    )

    # ─────────────────────────────────────────────────────────────────────
    # PROCESS ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--threads", "-t",
        type=_number("Threads"),
        default=DEFAULT_THREADS,
        metavar="N",
        help=f"Number of worker threads (default: {DEFAULT_THREADS})"
    )

    parser.add_argument(
        "--daemon", "-d",
        action="store_true",
        help="Detach and run in the background"
    )

    parser.add_argument(
        "--chroot",
        action="store_true",
        help="Restrict the filesystem view to PATH (requires root)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--index",
        default=DEFAULT_INDEX,
        metavar="NAME",
        help=f"Index file served for directories (default: {DEFAULT_INDEX})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--completions",
        choices=SHELLS,
        metavar="SHELL",
        help="Print a completion script for bash, zsh or fish and exit"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"{PROG} {__version__}"
    )

    return parser


def main(argv=None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # When generating completions, do that and nothing else
    if args.completions:
        sys.stdout.write(generate(args.completions, parser, PROG))
        return 0

    try:
        config = ServerConfig.from_args(args)
        FileServer(config).run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
