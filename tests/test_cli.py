from __future__ import annotations

from pathlib import Path

import pytest

from wgsentinel import cli
from wgsentinel._lock import run_lock
from wgsentinel.config import SentinelConfig
from wgsentinel.exceptions import BackendUnavailableError
from wgsentinel.models import Ledger
from wgsentinel.sentinel import CycleReport


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in ("TIMEOUT_THRESHOLD", "PUSHOVER_APP_TOKEN", "PUSHOVER_USER_KEY", "STATE_FILE", "LOCK_FILE"):
        monkeypatch.delenv(key, raising=False)


def _args(tmp_path: Path, *extra: str) -> list[str]:
    return ["--state-file", str(tmp_path / "state"), "--lock-file", str(tmp_path / "lock"), *extra]


def test_successful_cycle_exits_zero(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    async def _fake_run(config: SentinelConfig, *, dry_run: bool) -> CycleReport:
        seen["config"] = config
        seen["dry_run"] = dry_run
        return CycleReport(events=(), ledger=Ledger.empty(), delivered=0, failed=0, saved=True)

    monkeypatch.setattr(cli, "_run", _fake_run)

    assert cli.main(_args(tmp_path, "--threshold", "90", "--container", "vpn", "--dry-run")) == cli.EXIT_OK

    config = seen["config"]
    assert isinstance(config, SentinelConfig)
    assert config.timeout_threshold == 90
    assert config.container_name == "vpn"
    assert config.state_file == tmp_path / "state"
    assert seen["dry_run"] is True


def test_backend_failure_exits_one(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    async def _fake_run(config: SentinelConfig, *, dry_run: bool) -> CycleReport:
        raise BackendUnavailableError("Cannot connect to the Docker daemon")

    monkeypatch.setattr(cli, "_run", _fake_run)

    assert cli.main(_args(tmp_path)) == cli.EXIT_SETUP_FAILURE


def test_lock_contention_exits_one_without_running(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[SentinelConfig] = []

    async def _fake_run(config: SentinelConfig, *, dry_run: bool) -> CycleReport:
        calls.append(config)
        return CycleReport(events=(), ledger=Ledger.empty(), delivered=0, failed=0, saved=True)

    monkeypatch.setattr(cli, "_run", _fake_run)

    with run_lock(tmp_path / "lock"):
        assert cli.main(_args(tmp_path)) == cli.EXIT_SETUP_FAILURE

    assert calls == []


def test_invalid_configuration_exits_one(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TIMEOUT_THRESHOLD", "soon")

    assert cli.main(_args(tmp_path)) == cli.EXIT_SETUP_FAILURE
