"""
Unit tests for shell completion generation.
"""

import pytest

from brownhttpd.__main__ import PROG, build_parser
from brownhttpd.completions import collect_options, generate


@pytest.fixture
def parser():
    return build_parser()


class TestCollectOptions:

    def test_flags_and_values(self, parser):
        options = {tuple(o.flags): o for o in collect_options(parser)}

        assert options[("-p", "--port")].takes_value is True
        assert options[("-d", "--daemon")].takes_value is False
        assert options[("--completions",)].choices == ["bash", "zsh", "fish"]

    def test_positional_is_skipped(self, parser):
        flags = [flag for o in collect_options(parser) for flag in o.flags]

        assert "PATH" not in flags
        assert "path" not in flags


class TestGenerate:

    def test_bash(self, parser):
        script = generate("bash", parser, PROG)

        assert script.startswith("_brownhttpd() {")
        assert "--chroot" in script
        assert '-p|--port)' in script
        assert 'compgen -W "bash zsh fish"' in script
        assert "compgen -d" in script

    def test_zsh(self, parser):
        script = generate("zsh", parser, PROG)

        assert script.startswith("#compdef brownhttpd")
        assert "'(-p --port)'{-p,--port}'[Port to listen on (default\\: 7878)]:PORT: '" in script
        assert ":SHELL:(bash zsh fish)" in script
        assert "'::PATH:_directories'" in script

    def test_fish(self, parser):
        script = generate("fish", parser, PROG)

        assert "complete -c brownhttpd -s t -l threads -r" in script
        assert "complete -c brownhttpd -l completions -x -a 'bash zsh fish'" in script
        assert "complete -c brownhttpd -s d -l daemon -d 'Detach and run in the background'" in script

    def test_unknown_shell(self, parser):
        with pytest.raises(ValueError, match="Unknown shell"):
            generate("tcsh", parser, PROG)
