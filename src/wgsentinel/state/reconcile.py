"""Peer connectivity reconciliation.

This module intentionally performs *no* I/O. The backend adapter is
responsible for producing well-formed handshake records and the store for
loading and saving ledgers; here the previous ledger and one snapshot are
turned into the next ledger plus the transitions between them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from wgsentinel.models.events import TransitionEvent, TransitionKind
from wgsentinel.models.handshake import HandshakeRecord
from wgsentinel.models.ledger import Ledger


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    """Transitions found by one reconciliation, and the ledger to persist."""

    events: tuple[TransitionEvent, ...]
    ledger: Ledger

    @property
    def connected_events(self) -> tuple[TransitionEvent, ...]:
        return tuple(e for e in self.events if e.kind is TransitionKind.CONNECTED)

    @property
    def disconnected_events(self) -> tuple[TransitionEvent, ...]:
        return tuple(e for e in self.events if e.kind is TransitionKind.DISCONNECTED)


def is_connected(elapsed_seconds: int, threshold: int) -> bool:
    """A peer is connected only while strictly below the threshold."""
    return elapsed_seconds < threshold


def latest_handshakes(snapshot: Iterable[HandshakeRecord]) -> dict[str, int]:
    """Collapse a snapshot to one timestamp per peer.

    When a peer is listed more than once, the last record wins; the peer
    keeps the position of its first appearance.
    """
    handshakes: dict[str, int] = {}
    for record in snapshot:
        handshakes[record.peer] = record.last_handshake
    return handshakes


def reconcile(
    snapshot: Iterable[HandshakeRecord],
    previous: Ledger,
    *,
    now: int,
    threshold: int,
) -> ReconcileResult:
    """Diff one handshake snapshot against the previous ledger.

    Policy:
    - Connectivity is decided from the current snapshot alone: a peer is
      connected when ``now - last_handshake < threshold``.
    - ``previous`` only decides whether a transition is new. A peer that
      stays connected emits nothing.
    - Every previously connected peer that is not connected now emits one
      ``DISCONNECTED`` event, timed from its last *recorded* handshake
      (``0`` when none was recorded).
    - The next ledger is built from scratch; nothing is carried over from
      ``previous``.

    Events are ordered: connections in snapshot order, then disconnections
    sorted by peer id. ``previous.connected`` is a set with no iteration
    order of its own, so sorting keeps the output deterministic.
    """
    current_handshakes = latest_handshakes(snapshot)
    current_connected: set[str] = set()
    events: list[TransitionEvent] = []

    for peer, last_handshake in current_handshakes.items():
        elapsed = now - last_handshake
        if not is_connected(elapsed, threshold):
            continue
        current_connected.add(peer)
        if peer not in previous.connected:
            events.append(TransitionEvent(kind=TransitionKind.CONNECTED, peer=peer, elapsed_seconds=elapsed))

    for peer in sorted(previous.connected - current_connected):
        elapsed = now - previous.last_handshake.get(peer, 0)
        events.append(TransitionEvent(kind=TransitionKind.DISCONNECTED, peer=peer, elapsed_seconds=elapsed))

    return ReconcileResult(
        events=tuple(events),
        ledger=Ledger(connected=frozenset(current_connected), last_handshake=current_handshakes),
    )
