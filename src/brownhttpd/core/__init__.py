"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The process and networking plumbing underneath the file server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         PROCESS SETUP                               │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Daemonize (double fork), chdir into the root, optional chroot    │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                       POOLED TCP SERVER                             │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Binds the listening socket (IPv4 any-address or IPv6 loopback)  │
    │  • Runs the accept loop and hands each connection to the pool       │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          THREAD POOL                                 │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Fixed number of workers pulling from one shared queue            │
    │  • A failing connection is logged, the worker keeps running        │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from . import process
from .socket_server import PooledTCPServer
from .thread_pool import ThreadPool

__all__ = [
    "process",          # daemonize(), change_dir(), confine()
    "PooledTCPServer",  # Listener + hand-off to the pool
    "ThreadPool",       # Fixed-size worker pool
]
