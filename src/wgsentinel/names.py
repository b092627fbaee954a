"""Friendly peer names from a wg-easy WireGuard config."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Protocol

_logger = logging.getLogger(__name__)

# wg-easy writes "# Client: <name> (<id>)" above each [Peer] block.
_CLIENT_COMMENT = re.compile(r"^# Client: (.*) \(.+\)$")
_PUBLIC_KEY = re.compile(r"^PublicKey\s*=\s*(.+)$")


class NameResolver(Protocol):
    """Maps a peer identifier to a display label. Must never raise."""

    def label_for(self, peer: str) -> str:
        ...


def parse_friendly_names(config_text: str) -> dict[str, str]:
    """Map public keys to the client name from the preceding comment."""
    names: dict[str, str] = {}
    current: str | None = None
    for raw_line in config_text.splitlines():
        line = raw_line.strip()
        comment = _CLIENT_COMMENT.match(line)
        if comment is not None:
            current = comment.group(1).strip() or None
            continue
        key = _PUBLIC_KEY.match(line)
        if key is None:
            continue
        pubkey = key.group(1).strip()
        if current and pubkey:
            names[pubkey] = current
            _logger.debug("Mapped PublicKey %s to friendly name %r", pubkey, current)
        else:
            _logger.debug("Found PublicKey %s without preceding friendly name comment.", pubkey)
        current = None

    if not names:
        _logger.warning("No friendly names found in the WireGuard config.")
    return names


class FriendlyNameResolver:
    """Render peers as ``'<name>' (<key>)``, or the bare key when unnamed."""

    def __init__(self, names: Mapping[str, str] | None = None) -> None:
        self._names = dict(names or {})

    @classmethod
    def from_config(cls, config_text: str) -> FriendlyNameResolver:
        return cls(parse_friendly_names(config_text))

    def __len__(self) -> int:
        return len(self._names)

    def name_for(self, peer: str) -> str | None:
        return self._names.get(peer)

    def label_for(self, peer: str) -> str:
        name = self._names.get(peer)
        if name:
            return f"'{name}' ({peer})"
        return peer
