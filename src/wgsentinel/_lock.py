"""Cross-process run lock."""

from __future__ import annotations

import contextlib
import fcntl
import os
from collections.abc import Iterator
from pathlib import Path

from wgsentinel.exceptions import SentinelLockError


@contextlib.contextmanager
def run_lock(path: str | os.PathLike[str]) -> Iterator[Path]:
    """Hold a non-blocking exclusive ``flock`` for the duration of a run.

    A second run (e.g. an overlapping cron tick) fails immediately with
    :class:`SentinelLockError` instead of waiting. The lock is released when
    the block exits, whatever the outcome.
    """
    lock_path = Path(path)
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        fh = lock_path.open("a+")
    except OSError as exc:
        raise SentinelLockError(f"Cannot open lock file {lock_path}: {exc}") from exc

    try:
        try:
            fcntl.flock(fh.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as exc:
            raise SentinelLockError(f"Another run holds the lock file {lock_path}") from exc

        fh.seek(0)
        fh.truncate()
        fh.write(str(os.getpid()))
        fh.flush()
        try:
            yield lock_path
        finally:
            fcntl.flock(fh.fileno(), fcntl.LOCK_UN)
    finally:
        fh.close()
