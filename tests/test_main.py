"""Tests for the CLI — argument parsing, wiring and exit codes."""

from __future__ import annotations

import sqlite3
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from container_health.main import build_parser, main
from container_health.runtime.models import StatsSample


@pytest.fixture
def cli_settings(tmp_path: Path) -> Generator[MagicMock, None, None]:
    with patch("container_health.main.settings") as mock_settings:
        mock_settings.db_path = str(tmp_path / "monitor.db")
        mock_settings.db_pool_size = 2
        mock_settings.db_pool_timeout = 1.0
        mock_settings.cache_backend = "local"
        mock_settings.redis_url = ""
        mock_settings.docker_socket = "/var/run/docker.sock"
        mock_settings.docker_timeout = 1.0
        mock_settings.watch_interval = 5.0
        mock_settings.default_cache_ttl = 60
        mock_settings.log_level = "WARNING"
        yield mock_settings


@pytest.fixture
def docker(runtime: Any) -> Generator[MagicMock, None, None]:
    """Patch DockerClient so the CLI talks to the in-memory runtime."""
    with patch("container_health.main.DockerClient") as mock_cls:
        mock_cls.return_value.__enter__.return_value = runtime
        yield mock_cls


def run_cli(*argv: str) -> int:
    with pytest.raises(SystemExit) as exc:
        main(list(argv))
    return exc.value.code


def count(db_path: str, table: str) -> int:
    conn = sqlite3.connect(db_path)
    try:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
    finally:
        conn.close()


class TestParser:
    def test_repeated_names(self) -> None:
        args = build_parser().parse_args(["monitor", "-n", "a", "--name", "b", "c"])
        assert args.name == ["a", "b", "c"]
        assert args.watch is False

    def test_monitor_requires_name(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["monitor"])

    def test_cache_ttl(self) -> None:
        args = build_parser().parse_args(["monitor-all", "--cache-ttl", "5", "--watch"])
        assert args.cache_ttl == 5
        assert args.watch is True

    @pytest.mark.parametrize("ttl", ["0", "-3", "soon"])
    def test_cache_ttl_must_be_positive(self, ttl: str) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["monitor-all", "--cache-ttl", ttl])


class TestCommands:
    def test_monitor(self, cli_settings, docker, runtime) -> None:
        runtime.add("a", stats=StatsSample(memory_limit_bytes=1024))
        runtime.add("b", state="exited")

        assert run_cli("monitor", "--name", "a", "b") == 0
        assert count(cli_settings.db_path, "containers") == 2
        assert count(cli_settings.db_path, "container_history") == 2

    def test_missing_container_still_succeeds(self, cli_settings, docker, runtime) -> None:
        runtime.add("a", stats=StatsSample(memory_limit_bytes=1024))
        assert run_cli("monitor", "--name", "ghost", "a") == 0
        assert count(cli_settings.db_path, "containers") == 1

    def test_monitor_all(self, cli_settings, docker, runtime) -> None:
        runtime.add("x", state="paused")
        runtime.add("y", state="dead")
        assert run_cli("monitor-all") == 0
        assert count(cli_settings.db_path, "container_history") == 2

    def test_runtime_unreachable(self, cli_settings, docker, runtime) -> None:
        runtime.unreachable = True
        assert run_cli("monitor-all") == 1

    def test_store_unavailable(self, cli_settings, docker, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        cli_settings.db_path = str(blocker / "monitor.db")
        assert run_cli("monitor", "--name", "a") == 1

    def test_wipe(self, cli_settings, docker, runtime) -> None:
        runtime.add("a", state="exited")
        run_cli("monitor", "--name", "a")
        assert run_cli("wipe") == 0
        assert count(cli_settings.db_path, "containers") == 0
        assert count(cli_settings.db_path, "container_history") == 0

    def test_unknown_cache_backend(self, cli_settings, docker) -> None:
        cli_settings.cache_backend = "memcached"
        assert run_cli("monitor", "--name", "a") == 1
        assert run_cli("wipe", "--include-cache") == 1

    def test_no_command(self, cli_settings) -> None:
        assert run_cli() == 1
