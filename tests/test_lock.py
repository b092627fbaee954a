from __future__ import annotations

import os
from pathlib import Path

import pytest

from wgsentinel._lock import run_lock
from wgsentinel.exceptions import SentinelLockError


def test_second_holder_fails_immediately(tmp_path: Path) -> None:
    lock_path = tmp_path / "wg_monitor.lock"

    with run_lock(lock_path):
        with pytest.raises(SentinelLockError):
            with run_lock(lock_path):
                pass


def test_lock_is_released_after_error(tmp_path: Path) -> None:
    lock_path = tmp_path / "wg_monitor.lock"

    with pytest.raises(RuntimeError):
        with run_lock(lock_path):
            raise RuntimeError("boom")

    with run_lock(lock_path) as held:
        assert held == lock_path


def test_lock_file_records_pid(tmp_path: Path) -> None:
    lock_path = tmp_path / "nested" / "wg_monitor.lock"

    with run_lock(lock_path):
        assert lock_path.read_text() == str(os.getpid())
