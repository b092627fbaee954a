"""Notification text rendering."""

from __future__ import annotations

from dataclasses import dataclass

from wgsentinel._constants import (
    CONNECTED_GLYPH,
    DISCONNECTED_GLYPH,
    PUSHOVER_MESSAGE_MAX,
    PUSHOVER_TITLE_MAX,
    VPN_NAME_MAX,
)
from wgsentinel.models.events import TransitionEvent, TransitionKind
from wgsentinel.names import NameResolver

_UNITS: tuple[tuple[str, int], ...] = (
    ("d", 86400),
    ("h", 3600),
    ("m", 60),
    ("s", 1),
)


@dataclass(frozen=True)
class Notification:
    title: str
    message: str


def format_duration(seconds: int) -> str:
    """Render seconds with the two most significant units, e.g. ``8m 20s``.

    Negative values (handshakes stamped in the future) clamp to ``0s``.
    """
    remaining = max(0, int(seconds))
    parts: list[str] = []
    for suffix, size in _UNITS:
        amount, remaining = divmod(remaining, size)
        if amount or parts:
            parts.append(f"{amount}{suffix}")
        if len(parts) == 2:
            break
    if not parts:
        return "0s"
    # Drop a trailing zero unit ("2h 0m" -> "2h").
    if len(parts) == 2 and parts[1].startswith("0"):
        parts.pop()
    return " ".join(parts)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    if limit <= 1:
        return text[:limit]
    return f"{text[: limit - 1]}…"


def build_title(kind: TransitionKind, vpn_name: str | None = None) -> str:
    if kind is TransitionKind.CONNECTED:
        title = f"{CONNECTED_GLYPH} Peer Connected"
    else:
        title = f"{DISCONNECTED_GLYPH} Peer Disconnected"
    label = (vpn_name or "").strip()
    if label:
        title = f"{title} [{truncate(label, VPN_NAME_MAX)}]"
    return truncate(title, PUSHOVER_TITLE_MAX)


def build_notification(
    event: TransitionEvent,
    resolver: NameResolver,
    *,
    vpn_name: str | None = None,
) -> Notification:
    label = resolver.label_for(event.peer)
    ago = format_duration(event.elapsed_seconds)
    if event.kind is TransitionKind.CONNECTED:
        message = f"Peer {label} is now online (last handshake {ago} ago)."
    else:
        message = f"Peer {label} appears to be offline (last handshake {ago} ago)."
    return Notification(
        title=build_title(event.kind, vpn_name),
        message=truncate(message, PUSHOVER_MESSAGE_MAX),
    )
