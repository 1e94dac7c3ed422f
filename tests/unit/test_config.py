"""
Unit tests for server configuration.
"""

import argparse
import dataclasses
import logging
import os
from pathlib import Path

import pytest

from brownhttpd.config import ServerConfig


def make_args(**overrides) -> argparse.Namespace:
    values = dict(
        path=None, index="index.html", port=7878, ipv6=False,
        daemon=False, chroot=False, threads=1, log_level="INFO",
    )
    values.update(overrides)
    return argparse.Namespace(**values)


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_defaults(self):
        config = ServerConfig()

        assert config.root == os.getcwd()
        assert config.port == 7878
        assert config.threads == 1
        assert config.index == "index.html"
        assert config.daemon is False
        assert config.chroot is False
        assert config.ipv6 is False

    def test_is_immutable(self, tmp_path: Path):
        config = ServerConfig(root=str(tmp_path))

        with pytest.raises(dataclasses.FrozenInstanceError):
            config.port = 80

    def test_host(self):
        assert ServerConfig().host == "0.0.0.0"
        assert ServerConfig(ipv6=True).host == "::1"

    def test_level(self):
        assert ServerConfig(log_level="debug").level == logging.DEBUG

    def test_valid(self, tmp_path: Path):
        ServerConfig(root=str(tmp_path), port=0, threads=8).validate()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"threads": 0},
        {"queue_size": 0},
        {"index": ""},
        {"index": "a/index.html"},
        {"log_level": "LOUD"},
    ])
    def test_invalid(self, tmp_path: Path, overrides):
        config = ServerConfig(root=str(tmp_path), **overrides)

        with pytest.raises(ValueError):
            config.validate()

    def test_relative_root(self):
        with pytest.raises(ValueError, match="absolute"):
            ServerConfig(root="relative/dir").validate()

    def test_missing_root(self, tmp_path: Path):
        with pytest.raises(ValueError, match="does not exist"):
            ServerConfig(root=str(tmp_path / "nope")).validate()


class TestFromArgs:
    """Tests for ServerConfig.from_args()."""

    def test_root_defaults_to_cwd(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = ServerConfig.from_args(make_args())

        assert config.root == str(tmp_path)

    def test_relative_root_is_made_absolute(self, tmp_path: Path, monkeypatch):
        (tmp_path / "public").mkdir()
        monkeypatch.chdir(tmp_path)

        config = ServerConfig.from_args(make_args(path="public"))

        assert config.root == str(tmp_path / "public")

    def test_flags(self, tmp_path: Path):
        config = ServerConfig.from_args(make_args(
            path=str(tmp_path), port=8000, threads=4, ipv6=True,
            daemon=True, chroot=True, index="home.html", log_level="DEBUG",
        ))

        assert config == ServerConfig(
            root=str(tmp_path), port=8000, threads=4, ipv6=True,
            daemon=True, chroot=True, index="home.html", log_level="DEBUG",
        )
