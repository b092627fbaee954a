"""Sentinel configuration for wgsentinel."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from wgsentinel._constants import (
    DEFAULT_CONTAINER_NAME,
    DEFAULT_LOCK_FILE,
    DEFAULT_STATE_FILE_NAME,
    DEFAULT_TIMEOUT_THRESHOLD,
    DEFAULT_WG_CONFIG_PATH,
    PUSHOVER_API_URL,
)
from wgsentinel.exceptions import SentinelConfigError

_CREDENTIAL_FIELDS = ("pushover_app_token", "pushover_user_key")


def _default_state_file() -> Path:
    return Path.home() / DEFAULT_STATE_FILE_NAME


def _env_str(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _parse_number(env_key: str, raw: str, kind: type[int] | type[float]) -> int | float:
    try:
        return kind(raw.strip())
    except ValueError as exc:
        raise SentinelConfigError(f"{env_key} must be a {kind.__name__}, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class SentinelConfig:
    """Sentinel configuration.

    Parameters
    ----------
    container_name : str
        Name of the docker container running WireGuard.
    timeout_threshold : int
        Seconds since the last handshake after which a peer counts as
        disconnected. A peer is connected only while strictly below it.
    state_file : Path
        Location of the persisted ledger.
    lock_file : Path
        Lock file guarding against overlapping runs.
    wg_config_path : str
        Path of the WireGuard config *inside* the container, read to
        resolve friendly peer names.
    pushover_app_token : str or None
        Pushover application token. Notifications are only logged when
        either credential is missing.
    pushover_user_key : str or None
        Pushover user (or group) key.
    pushover_api_url : str
        Pushover messages endpoint.
    vpn_name : str or None
        Optional label identifying this gateway in notification titles.
    notify_max_attempts : int
        Delivery attempts per notification.
    notify_retry_delay : float
        Seconds to wait between delivery attempts.
    command_timeout : float
        Seconds allowed for each docker command.
    """

    container_name: str = DEFAULT_CONTAINER_NAME
    timeout_threshold: int = DEFAULT_TIMEOUT_THRESHOLD
    state_file: Path = dataclasses.field(default_factory=_default_state_file)
    lock_file: Path = Path(DEFAULT_LOCK_FILE)
    wg_config_path: str = DEFAULT_WG_CONFIG_PATH
    pushover_app_token: str | None = None
    pushover_user_key: str | None = None
    pushover_api_url: str = PUSHOVER_API_URL
    vpn_name: str | None = None
    notify_max_attempts: int = 3
    notify_retry_delay: float = 5.0
    command_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.timeout_threshold <= 0:
            raise SentinelConfigError(f"timeout_threshold must be positive, got {self.timeout_threshold}")
        if self.notify_max_attempts < 1:
            raise SentinelConfigError(f"notify_max_attempts must be at least 1, got {self.notify_max_attempts}")
        if self.notify_retry_delay < 0:
            raise SentinelConfigError(f"notify_retry_delay must not be negative, got {self.notify_retry_delay}")
        if self.command_timeout <= 0:
            raise SentinelConfigError(f"command_timeout must be positive, got {self.command_timeout}")
        if not self.container_name.strip():
            raise SentinelConfigError("container_name must be non-empty")

    @property
    def has_pushover_credentials(self) -> bool:
        return bool(self.pushover_app_token and self.pushover_user_key)

    def redacted(self) -> dict[str, Any]:
        """Return the configuration as a dict that is safe to log."""
        values = {field.name: getattr(self, field.name) for field in dataclasses.fields(self)}
        values["state_file"] = str(self.state_file)
        values["lock_file"] = str(self.lock_file)
        for key in _CREDENTIAL_FIELDS:
            if values[key] is not None:
                values[key] = "<redacted>"
        return values

    @classmethod
    def from_env(cls, **overrides: Any) -> SentinelConfig:
        """Create configuration from environment variables.

        Reads the same variable names as the shell sentinel's container
        image (``WG_CONTAINER_NAME``, ``TIMEOUT_THRESHOLD``,
        ``PUSHOVER_APP_TOKEN``, ``PUSHOVER_USER_KEY``, ``VPN_NAME``, ...).
        Explicit keyword arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        SentinelConfig
            Populated configuration.

        Raises
        ------
        SentinelConfigError
            If a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "WG_CONTAINER_NAME": "container_name",
            "WG_CONFIG_PATH": "wg_config_path",
            "PUSHOVER_APP_TOKEN": "pushover_app_token",
            "PUSHOVER_USER_KEY": "pushover_user_key",
            "PUSHOVER_API_URL": "pushover_api_url",
            "VPN_NAME": "vpn_name",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = _env_str(env.get(env_key))
            if val is not None:
                config_kwargs[field_name] = val

        _ENV_PATH_MAP = {
            "STATE_FILE": "state_file",
            "LOCK_FILE": "lock_file",
        }
        for env_key, field_name in _ENV_PATH_MAP.items():
            val = _env_str(env.get(env_key))
            if val is not None:
                config_kwargs[field_name] = Path(val).expanduser()

        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "TIMEOUT_THRESHOLD": ("timeout_threshold", int),
            "NOTIFY_MAX_ATTEMPTS": ("notify_max_attempts", int),
            "NOTIFY_RETRY_DELAY": ("notify_retry_delay", float),
            "COMMAND_TIMEOUT": ("command_timeout", float),
        }
        for env_key, (field_name, kind) in _ENV_NUMBER_MAP.items():
            val = _env_str(env.get(env_key))
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _parse_number(env_key, val, kind)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
