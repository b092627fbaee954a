"""Data models for wgsentinel."""

from wgsentinel.models.events import TransitionEvent, TransitionKind
from wgsentinel.models.handshake import HandshakeRecord
from wgsentinel.models.ledger import Ledger

__all__ = [
    "HandshakeRecord",
    "Ledger",
    "TransitionEvent",
    "TransitionKind",
]
