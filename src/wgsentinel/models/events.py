"""Connectivity transition events.

Events are produced and consumed within one reconciliation cycle and are
never persisted.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class TransitionKind(StrEnum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class TransitionEvent(BaseModel):
    """A peer crossed the connectivity threshold since the previous cycle.

    ``elapsed_seconds`` is measured from the handshake that justified the
    transition: the fresh handshake for ``CONNECTED``, the last recorded one
    for ``DISCONNECTED``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: TransitionKind
    peer: str
    elapsed_seconds: int
