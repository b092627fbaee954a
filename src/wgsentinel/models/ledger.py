"""Durable connectivity ledger model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Ledger(BaseModel):
    """Which peers were connected, and when each was last seen.

    The ledger describes the world as of the end of the previous
    reconciliation cycle. It is never updated in place: each cycle produces
    a new ledger that replaces the old one wholesale.

    A peer in ``connected`` is not required to appear in ``last_handshake``;
    readers fall back to ``0`` for a missing timestamp.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    connected: frozenset[str] = Field(default_factory=frozenset)
    last_handshake: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> Ledger:
        return cls()

    def is_empty(self) -> bool:
        return not self.connected and not self.last_handshake
