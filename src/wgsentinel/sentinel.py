"""Single-shot reconciliation driver."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import aiohttp

from wgsentinel._constants import PUSHOVER_REQUEST_TIMEOUT
from wgsentinel._format import build_notification
from wgsentinel.backend import DockerWireGuardBackend, SubprocessRunner, WireGuardBackend
from wgsentinel.config import SentinelConfig
from wgsentinel.exceptions import (
    SentinelDeliveryError,
    SentinelError,
    SentinelPersistenceError,
    SentinelSetupError,
)
from wgsentinel.models.events import TransitionEvent, TransitionKind
from wgsentinel.models.ledger import Ledger
from wgsentinel.names import FriendlyNameResolver, NameResolver
from wgsentinel.notify import LogNotifier, Notifier, PushoverNotifier
from wgsentinel.state.reconcile import reconcile
from wgsentinel.state.store import LedgerStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleReport:
    """What one reconciliation cycle observed and did."""

    events: tuple[TransitionEvent, ...]
    ledger: Ledger
    delivered: int
    failed: int
    saved: bool

    @property
    def changed(self) -> bool:
        return bool(self.events)


class Sentinel:
    """Poll the backend once, notify transitions, persist the new ledger.

    Usage::

        async with Sentinel(config) as sentinel:
            report = await sentinel.run_cycle()

    Collaborators default to the docker backend, the Pushover notifier (or
    a logging notifier without credentials) and the file ledger store, and
    can each be injected.
    """

    def __init__(
        self,
        config: SentinelConfig,
        *,
        backend: WireGuardBackend | None = None,
        notifier: Notifier | None = None,
        store: LedgerStore | None = None,
        resolver: NameResolver | None = None,
        session: aiohttp.ClientSession | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._backend: WireGuardBackend = backend or DockerWireGuardBackend(
            config.container_name,
            runner=SubprocessRunner(timeout=config.command_timeout),
            config_path=config.wg_config_path,
        )
        self._notifier = notifier
        self._store = store or LedgerStore(config.state_file)
        self._resolver = resolver
        self._external_session = session is not None
        self._http_session = session
        self._clock = clock

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> Sentinel:
        if self._notifier is None:
            if self._config.has_pushover_credentials:
                if self._http_session is None:
                    self._http_session = aiohttp.ClientSession(
                        timeout=aiohttp.ClientTimeout(total=PUSHOVER_REQUEST_TIMEOUT)
                    )
                self._notifier = PushoverNotifier(
                    self._http_session,
                    app_token=self._config.pushover_app_token or "",
                    user_key=self._config.pushover_user_key or "",
                    api_url=self._config.pushover_api_url,
                    max_attempts=self._config.notify_max_attempts,
                    retry_delay=self._config.notify_retry_delay,
                )
            else:
                _logger.warning(
                    "PUSHOVER_APP_TOKEN or PUSHOVER_USER_KEY is not set. Notifications will be skipped."
                )
                self._notifier = LogNotifier()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Cycle steps
    # ------------------------------------------------------------------

    def _require_notifier(self) -> Notifier:
        if self._notifier is None:
            raise SentinelError("Sentinel not initialized. Use 'async with Sentinel(...) as sentinel:'")
        return self._notifier

    async def _build_resolver(self) -> NameResolver:
        """Resolve friendly names; failures degrade to raw peer ids."""
        if self._resolver is not None:
            return self._resolver
        try:
            text = await self._backend.read_config()
        except SentinelSetupError as exc:
            _logger.warning("Cannot build friendly names (%s). Peers will be shown by public key.", exc)
            return FriendlyNameResolver()
        return FriendlyNameResolver.from_config(text)

    async def _deliver(self, event: TransitionEvent, resolver: NameResolver) -> bool:
        notifier = self._require_notifier()
        note = build_notification(event, resolver, vpn_name=self._config.vpn_name)
        label = resolver.label_for(event.peer)
        if event.kind is TransitionKind.CONNECTED:
            _logger.info("Peer %s is now connected (Handshake %ds ago).", label, event.elapsed_seconds)
        else:
            _logger.info("Peer %s has disconnected (Last handshake seen %ds ago).", label, event.elapsed_seconds)
        try:
            await notifier.send(note.title, note.message)
        except SentinelDeliveryError as exc:
            _logger.warning("Failed to send %s notification for %s: %s", event.kind.value, label, exc)
            return False
        return True

    def _save(self, ledger: Ledger) -> bool:
        try:
            self._store.save(ledger)
        except SentinelPersistenceError:
            _logger.error(
                "Error saving state. State might be inconsistent for the next run.",
                exc_info=True,
            )
            return False
        return True

    async def run_cycle(self) -> CycleReport:
        """Run one poll, diff, notify and persist pass.

        Raises
        ------
        SentinelSetupError
            If the backend is unavailable. Nothing has been notified or
            written at that point.
        SentinelPersistenceError
            If an existing state file cannot be read.
        """
        self._require_notifier()
        await self._backend.check_available()

        previous = self._store.load()
        resolver = await self._build_resolver()

        _logger.info("Fetching current handshake info...")
        snapshot = await self._backend.snapshot()
        now = int(self._clock())

        result = reconcile(snapshot, previous, now=now, threshold=self._config.timeout_threshold)
        if not result.events:
            _logger.info("No connectivity changes (%d peers connected).", len(result.ledger.connected))

        delivered = failed = 0
        for event in result.events:
            if await self._deliver(event, resolver):
                delivered += 1
            else:
                failed += 1

        saved = self._save(result.ledger)
        return CycleReport(
            events=result.events,
            ledger=result.ledger,
            delivered=delivered,
            failed=failed,
            saved=saved,
        )
