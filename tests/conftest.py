"""
pytest configuration and fixtures.
"""

import http.client
import socket
import threading
from pathlib import Path
from typing import Generator

import pytest

from brownhttpd import FileServer, ServerConfig


@pytest.fixture
def served_tree(tmp_path: Path) -> Path:
    """
    A small served root:

        a.txt            "hello" (5 bytes)
        sub/b.txt
        docs/index.html
        docs/other.txt
        my docs/notes.txt
    """
    (tmp_path / "a.txt").write_bytes(b"hello")

    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "b.txt").write_bytes(b"bee")

    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "index.html").write_text("<h1>Docs</h1>")
    (tmp_path / "docs" / "other.txt").write_text("other")

    (tmp_path / "my docs").mkdir()
    (tmp_path / "my docs" / "notes.txt").write_text("spaced out")

    return tmp_path


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class RunningServer:
    """FileServer bound to a free port and serving from a background thread."""

    def __init__(self, server: FileServer):
        self.server = server
        self.port = None
        self._thread: threading.Thread = None

    def start(self):
        # bind() before the thread starts, so the port accepts immediately
        _, self.port = self.server.bind()
        self._thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def get(self, path: str, method: str = "GET"):
        """Send one request; returns (status, headers, body)."""
        conn = http.client.HTTPConnection("127.0.0.1", self.port, timeout=5)
        try:
            conn.request(method, path)
            response = conn.getresponse()
            return response.status, dict(response.getheaders()), response.read()
        finally:
            conn.close()


@pytest.fixture
def start_server(served_tree: Path) -> Generator:
    """Factory: start_server(threads=4, index="home.html") -> RunningServer."""
    servers = []

    def start(**overrides) -> RunningServer:
        options = {"root": str(served_tree), "port": 0, "log_level": "WARNING"}
        options.update(overrides)
        running = RunningServer(FileServer(ServerConfig(**options)))
        running.start()
        servers.append(running)
        return running

    yield start

    for running in servers:
        running.stop()
