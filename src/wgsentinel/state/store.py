"""File-backed ledger store.

The ledger is kept as newline-delimited ``kind:identifier:value`` records::

    connected:<peer>:1
    handshake:<peer>:<unix seconds>

Record order is irrelevant. Unknown kinds and malformed values are skipped
with a warning so that a damaged or newer file never blocks a cycle.
"""

from __future__ import annotations

import contextlib
import logging
import os
import re
from pathlib import Path

from wgsentinel.exceptions import SentinelPersistenceError
from wgsentinel.models.ledger import Ledger

_logger = logging.getLogger(__name__)

KIND_CONNECTED = "connected"
KIND_HANDSHAKE = "handshake"
_CONNECTED_VALUE = "1"
_DIGITS = re.compile(r"[0-9]+")


def _parse_record(line: str) -> tuple[str, str, str] | None:
    kind, sep, rest = line.partition(":")
    if not sep:
        return None
    # Peer ids may contain ':'; the value is always the last field.
    peer, sep, value = rest.rpartition(":")
    if not sep:
        return None
    return kind.strip(), peer.strip(), value.strip()


def parse_ledger(text: str, *, source: str = "<ledger>") -> Ledger:
    """Parse serialized ledger records, skipping malformed ones."""
    connected: set[str] = set()
    handshakes: dict[str, int] = {}

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line:
            continue
        record = _parse_record(line)
        if record is not None:
            kind, peer, value = record
            if peer and kind == KIND_HANDSHAKE and _DIGITS.fullmatch(value):
                handshakes[peer] = int(value)
                continue
            if peer and kind == KIND_CONNECTED and value == _CONNECTED_VALUE:
                connected.add(peer)
                continue
        _logger.warning("Skipping malformed line %d in state file %s: %r", lineno, source, raw_line)

    return Ledger(connected=frozenset(connected), last_handshake=handshakes)


def serialize_ledger(ledger: Ledger) -> str:
    """Serialize a ledger; output is sorted so equal ledgers serialize equally."""
    lines = [f"{KIND_CONNECTED}:{peer}:{_CONNECTED_VALUE}" for peer in sorted(ledger.connected)]
    lines.extend(f"{KIND_HANDSHAKE}:{peer}:{ts}" for peer, ts in sorted(ledger.last_handshake.items()))
    return "".join(f"{line}\n" for line in lines)


class LedgerStore:
    """Load and atomically replace the persisted ledger."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def temp_path(self) -> Path:
        return self._path.with_name(f"{self._path.name}.tmp")

    def load(self) -> Ledger:
        """Read the ledger; a missing file is a cold start, not an error."""
        try:
            text = self._path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            _logger.info("State file %s not found. Starting fresh.", self._path)
            return Ledger.empty()
        except OSError as exc:
            raise SentinelPersistenceError(f"Cannot read state file {self._path}: {exc}") from exc

        ledger = parse_ledger(text, source=str(self._path))
        _logger.info(
            "Loaded state: %d previously connected peers, %d known handshakes.",
            len(ledger.connected),
            len(ledger.last_handshake),
        )
        return ledger

    def save(self, ledger: Ledger) -> None:
        """Replace the persisted ledger.

        The new content is written to a sibling temp file, synced, then
        renamed over the state file, so readers only ever observe a complete
        ledger.
        """
        tmp = self.temp_path
        payload = serialize_ledger(ledger)
        try:
            with tmp.open("w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise SentinelPersistenceError(f"Cannot write state file {self._path}: {exc}") from exc
        _logger.info("State saved to %s.", self._path)
