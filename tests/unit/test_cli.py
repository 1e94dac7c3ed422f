"""
Unit tests for the command-line interface.
"""

from pathlib import Path

import pytest

from brownhttpd import __main__ as cli


class TestParser:
    """Tests for build_parser()."""

    def test_defaults(self):
        args = cli.build_parser().parse_args([])

        assert args.path is None
        assert args.port == 7878
        assert args.threads == 1
        assert args.index == "index.html"
        assert args.daemon is False
        assert args.ipv6 is False
        assert args.chroot is False
        assert args.completions is None

    def test_all_flags(self):
        args = cli.build_parser().parse_args([
            "/srv/www", "-p", "8000", "-t", "4", "-d", "--ipv6",
            "--chroot", "--index", "home.html",
        ])

        assert args.path == "/srv/www"
        assert args.port == 8000
        assert args.threads == 4
        assert args.daemon is True
        assert args.ipv6 is True
        assert args.chroot is True
        assert args.index == "home.html"

    @pytest.mark.parametrize("argv, message", [
        (["--port", "http"], "Port must be a number!"),
        (["--threads", "many"], "Threads must be a number!"),
    ])
    def test_non_numeric_exits_1(self, argv, message, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(argv)

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "usage:" in err
        assert message in err

    def test_unknown_shell_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["--completions", "powershell"])

        assert exc_info.value.code == 1


class TestMain:
    """Tests for main()."""

    @pytest.mark.parametrize("shell, marker", [
        ("bash", "complete -F _brownhttpd brownhttpd"),
        ("zsh", "#compdef brownhttpd"),
        ("fish", "complete -c brownhttpd"),
    ])
    def test_completions_do_not_start_server(self, shell, marker, capsys, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("server must not start")

        monkeypatch.setattr(cli.FileServer, "run", fail)

        assert cli.main(["--completions", shell]) == 0
        assert marker in capsys.readouterr().out

    def test_missing_root_exits_1(self, tmp_path: Path, capsys):
        assert cli.main([str(tmp_path / "nope")]) == 1
        assert "Error: Root directory does not exist" in capsys.readouterr().err

    def test_invalid_thread_count_exits_1(self, tmp_path: Path, capsys):
        assert cli.main([str(tmp_path), "--threads", "0"]) == 1
        assert "threads must be >= 1" in capsys.readouterr().err

    def test_runs_server_with_config(self, tmp_path: Path, monkeypatch):
        seen = []
        monkeypatch.setattr(cli.FileServer, "run", lambda self: seen.append(self.config))

        assert cli.main([str(tmp_path), "-p", "9000", "-t", "3"]) == 0
        assert seen[0].root == str(tmp_path)
        assert seen[0].port == 9000
        assert seen[0].threads == 3

    def test_startup_failure_exits_1(self, tmp_path: Path, monkeypatch, capsys):
        from brownhttpd.core.process import StartupError

        def fail(self):
            raise StartupError("Chrooting failed: Operation not permitted")

        monkeypatch.setattr(cli.FileServer, "run", fail)

        assert cli.main([str(tmp_path), "--chroot"]) == 1
        assert "Chrooting failed" in capsys.readouterr().err
