"""wgsentinel - WireGuard peer connect/disconnect notifications from polled handshakes."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("wgsentinel")
except PackageNotFoundError:
    __version__ = "0+local"
from wgsentinel.backend import DockerWireGuardBackend, HandshakeSource, parse_handshake_output
from wgsentinel.config import SentinelConfig
from wgsentinel.exceptions import (
    BackendUnavailableError,
    SentinelConfigError,
    SentinelDeliveryError,
    SentinelError,
    SentinelLockError,
    SentinelPersistenceError,
    SentinelSetupError,
)
from wgsentinel.models import HandshakeRecord, Ledger, TransitionEvent, TransitionKind
from wgsentinel.names import FriendlyNameResolver, NameResolver
from wgsentinel.notify import LogNotifier, Notifier, PushoverNotifier
from wgsentinel.sentinel import CycleReport, Sentinel
from wgsentinel.state.reconcile import ReconcileResult, reconcile
from wgsentinel.state.store import LedgerStore

__all__ = [
    "__version__",
    "BackendUnavailableError",
    "CycleReport",
    "DockerWireGuardBackend",
    "FriendlyNameResolver",
    "HandshakeRecord",
    "HandshakeSource",
    "Ledger",
    "LedgerStore",
    "LogNotifier",
    "NameResolver",
    "Notifier",
    "PushoverNotifier",
    "ReconcileResult",
    "Sentinel",
    "SentinelConfig",
    "SentinelConfigError",
    "SentinelDeliveryError",
    "SentinelError",
    "SentinelLockError",
    "SentinelPersistenceError",
    "SentinelSetupError",
    "TransitionEvent",
    "TransitionKind",
    "parse_handshake_output",
    "reconcile",
]
