from __future__ import annotations

import pytest

from wgsentinel._constants import PUSHOVER_TITLE_MAX, VPN_NAME_MAX
from wgsentinel._format import build_notification, build_title, format_duration, truncate
from wgsentinel.models import TransitionEvent, TransitionKind
from wgsentinel.names import FriendlyNameResolver


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (0, "0s"),
        (-30, "0s"),
        (45, "45s"),
        (60, "1m"),
        (500, "8m 20s"),
        (7200, "2h"),
        (7505, "2h 5m"),
        (3 * 86400 + 4 * 3600 + 59, "3d 4h"),
    ],
)
def test_format_duration(seconds: int, expected: str) -> None:
    assert format_duration(seconds) == expected


def test_truncate_marks_cut_text() -> None:
    assert truncate("short", 10) == "short"
    assert truncate("abcdefghij", 5) == "abcd…"
    assert len(truncate("x" * 300, PUSHOVER_TITLE_MAX)) == PUSHOVER_TITLE_MAX


def test_title_carries_glyph_and_bounded_vpn_name() -> None:
    assert build_title(TransitionKind.CONNECTED) == "\U0001f7e2 Peer Connected"
    assert build_title(TransitionKind.DISCONNECTED, "home") == "\U0001f534 Peer Disconnected [home]"

    long_name = "n" * 100
    title = build_title(TransitionKind.CONNECTED, long_name)
    label = title[title.index("[") + 1 : title.index("]")]
    assert len(label) == VPN_NAME_MAX


def test_blank_vpn_name_is_ignored() -> None:
    assert build_title(TransitionKind.CONNECTED, "   ") == "\U0001f7e2 Peer Connected"


def test_build_notification_uses_resolved_label() -> None:
    resolver = FriendlyNameResolver({"KEY": "alice"})

    up = build_notification(
        TransitionEvent(kind=TransitionKind.CONNECTED, peer="KEY", elapsed_seconds=10),
        resolver,
        vpn_name="wg-vpn",
    )
    down = build_notification(
        TransitionEvent(kind=TransitionKind.DISCONNECTED, peer="OTHER", elapsed_seconds=500),
        resolver,
    )

    assert up.title == "\U0001f7e2 Peer Connected [wg-vpn]"
    assert up.message == "Peer 'alice' (KEY) is now online (last handshake 10s ago)."
    assert down.message == "Peer OTHER appears to be offline (last handshake 8m 20s ago)."
