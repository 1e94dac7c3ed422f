"""
Unit tests for process setup (chdir, chroot, daemonize) and the order in
which FileServer.prepare() applies them.
"""

import logging
import os
from pathlib import Path

import pytest

from brownhttpd import FileServer, ServerConfig
from brownhttpd import server as server_module
from brownhttpd.core import process
from brownhttpd.core.process import StartupError


class TestChangeDir:

    def test_enters_directory(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(os.getcwd())  # restored after the test

        process.change_dir(str(tmp_path))

        assert os.getcwd() == str(tmp_path)

    def test_missing_directory(self, tmp_path: Path):
        with pytest.raises(StartupError, match="Could not change root"):
            process.change_dir(str(tmp_path / "nope"))


class TestConfine:

    def test_failure_is_fatal(self, tmp_path: Path, monkeypatch):
        def deny(path):
            raise PermissionError(1, "Operation not permitted")

        monkeypatch.setattr(os, "chroot", deny)

        with pytest.raises(StartupError, match="Chrooting failed"):
            process.confine(str(tmp_path))

    def test_changes_into_new_root(self, tmp_path: Path, monkeypatch):
        calls = []
        monkeypatch.setattr(os, "chroot", lambda path: calls.append(("chroot", path)))
        monkeypatch.setattr(os, "chdir", lambda path: calls.append(("chdir", path)))

        process.confine(str(tmp_path))

        assert calls == [("chroot", str(tmp_path)), ("chdir", "/")]


class TestDaemonize:

    def test_fork_failure(self, monkeypatch):
        def no_fork():
            raise OSError(11, "Resource temporarily unavailable")

        monkeypatch.setattr(os, "fork", no_fork)

        with pytest.raises(StartupError, match="Daemonizing failed"):
            process.daemonize()

    def test_child_sequence(self, monkeypatch):
        calls = []
        monkeypatch.setattr(os, "fork", lambda: calls.append("fork") or 0)
        monkeypatch.setattr(os, "setsid", lambda: calls.append("setsid"))
        monkeypatch.setattr(os, "chdir", lambda path: calls.append(("chdir", path)))
        monkeypatch.setattr(os, "umask", lambda mask: calls.append(("umask", mask)))
        monkeypatch.setattr(process, "_redirect_stdio", lambda: calls.append("stdio"))

        process.daemonize()

        assert calls == ["fork", "setsid", "fork", ("chdir", "/"), ("umask", 0o027), "stdio"]

    def test_parent_exits(self, monkeypatch):
        monkeypatch.setattr(os, "fork", lambda: 1234)

        def fake_exit(code):
            raise SystemExit(code)

        monkeypatch.setattr(os, "_exit", fake_exit)

        with pytest.raises(SystemExit) as exc_info:
            process.daemonize()

        assert exc_info.value.code == 0


class TestPrepare:
    """FileServer.prepare() ordering."""

    @pytest.fixture
    def calls(self, monkeypatch):
        calls = []
        monkeypatch.setattr(process, "daemonize", lambda: calls.append("daemonize"))
        monkeypatch.setattr(process, "change_dir", lambda path: calls.append(("chdir", path)))
        monkeypatch.setattr(process, "confine", lambda path: calls.append(("chroot", path)))
        return calls

    def test_plain(self, tmp_path: Path, calls):
        server = FileServer(ServerConfig(root=str(tmp_path)))

        server.prepare()

        assert calls == [("chdir", str(tmp_path))]
        assert server.root == str(tmp_path)

    def test_daemon_then_chdir_then_chroot(self, tmp_path: Path, calls):
        server = FileServer(ServerConfig(root=str(tmp_path), daemon=True, chroot=True))

        server.prepare()

        assert calls == ["daemonize", ("chdir", str(tmp_path)), ("chroot", str(tmp_path))]

    def test_chroot_moves_served_root(self, tmp_path: Path, calls):
        server = FileServer(ServerConfig(root=str(tmp_path), chroot=True))

        server.prepare()

        assert server.root == "/"
        assert server.static.root_dir == "/"
        assert server.static.router.root == "/"

    def test_chroot_failure_aborts(self, tmp_path: Path, monkeypatch):
        monkeypatch.setattr(process, "change_dir", lambda path: None)

        def deny(path):
            raise StartupError("Chrooting failed: Operation not permitted")

        monkeypatch.setattr(process, "confine", deny)
        server = FileServer(ServerConfig(root=str(tmp_path), chroot=True))

        with pytest.raises(StartupError):
            server.prepare()

        assert server.root == str(tmp_path)


class TestRun:
    """FileServer.run() wiring."""

    def test_logging_uses_configured_level(self, tmp_path: Path, monkeypatch):
        levels = []
        monkeypatch.setattr(server_module, "setup_logging", levels.append)
        monkeypatch.setattr(FileServer, "prepare", lambda self: None)
        monkeypatch.setattr(FileServer, "bind", lambda self: ("0.0.0.0", 0))
        monkeypatch.setattr(FileServer, "serve_forever", lambda self: None)
        server = FileServer(ServerConfig(root=str(tmp_path), log_level="DEBUG"))

        server.run()

        assert levels == [logging.DEBUG]
