"""Custom exception hierarchy for wgsentinel."""

from __future__ import annotations


class SentinelError(Exception):
    """Base exception for all wgsentinel errors."""


class SentinelConfigError(SentinelError):
    """Invalid or missing configuration."""


class SentinelSetupError(SentinelError):
    """A precondition for running a cycle could not be met.

    Raised before any state is loaded or mutated; the driver maps it to
    exit code 1.
    """


class BackendUnavailableError(SentinelSetupError):
    """The WireGuard backend could not be queried."""

    def __init__(
        self,
        message: str,
        *,
        command: tuple[str, ...] = (),
        returncode: int | None = None,
    ) -> None:
        self.command = command
        self.returncode = returncode
        super().__init__(message)


class SentinelLockError(SentinelSetupError):
    """Another run holds the process lock."""


class SentinelDeliveryError(SentinelError):
    """A notification could not be delivered after all retry attempts."""

    def __init__(
        self,
        message: str,
        *,
        attempts: int = 0,
        status_code: int | None = None,
    ) -> None:
        self.attempts = attempts
        self.status_code = status_code
        super().__init__(message)


class SentinelPersistenceError(SentinelError):
    """The ledger file could not be read or written."""
