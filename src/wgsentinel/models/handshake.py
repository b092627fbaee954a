"""Handshake snapshot model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HandshakeRecord(BaseModel):
    """Latest handshake of one peer, as reported by a single poll.

    Parameters
    ----------
    peer : str
        Peer identifier (the WireGuard public key). Compared exactly.
    last_handshake : int
        Unix timestamp of the latest handshake. ``0`` means the peer has
        never completed a handshake.
    interface : str or None
        WireGuard interface the peer belongs to, when known.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    peer: str
    last_handshake: int = Field(..., ge=0)
    interface: str | None = None

    @field_validator("peer")
    @classmethod
    def _require_peer(cls, value: str) -> str:
        if not value or value.strip() != value:
            raise ValueError("peer must be non-empty and carry no surrounding whitespace")
        return value
