"""Push notification delivery."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

import aiohttp

from wgsentinel._constants import PUSHOVER_API_URL
from wgsentinel.exceptions import SentinelDeliveryError

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Delivers a titled message.

    Implementations own their retry policy and raise
    :class:`SentinelDeliveryError` once it is exhausted.
    """

    async def send(self, title: str, message: str) -> None:
        ...


class LogNotifier:
    """Notifier used when no push channel is configured: it only logs."""

    def __init__(self, reason: str = "Pushover credentials not set") -> None:
        self._reason = reason

    async def send(self, title: str, message: str) -> None:
        _logger.warning("%s. Skipping notification %r: %s", self._reason, title, message)


class PushoverNotifier:
    """Send notifications through the Pushover messages API.

    Delivery is retried up to ``max_attempts`` times with a fixed
    ``retry_delay`` between attempts. Any non-200 answer, client error or
    request timeout counts as a failed attempt.
    """

    def __init__(
        self,
        http_session: aiohttp.ClientSession,
        *,
        app_token: str,
        user_key: str,
        api_url: str = PUSHOVER_API_URL,
        max_attempts: int = 3,
        retry_delay: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._http = http_session
        self._app_token = app_token
        self._user_key = user_key
        self._api_url = api_url
        self._max_attempts = max_attempts
        self._retry_delay = retry_delay
        self._sleep = sleep

    async def _post(self, title: str, message: str) -> tuple[int | None, str]:
        form = {
            "token": self._app_token,
            "user": self._user_key,
            "title": title,
            "message": message,
        }
        try:
            async with self._http.post(self._api_url, data=form) as resp:
                text = await resp.text()
                return resp.status, text
        except TimeoutError:
            return None, "request timed out"
        except aiohttp.ClientError as exc:
            return None, str(exc)

    async def send(self, title: str, message: str) -> None:
        status: int | None = None
        for attempt in range(1, self._max_attempts + 1):
            _logger.info("Attempt %d/%d: Sending notification %r...", attempt, self._max_attempts, title)
            status, body = await self._post(title, message)
            if status == 200:
                _logger.info("Notification %r sent successfully on attempt %d.", title, attempt)
                return

            _logger.warning(
                "Attempt %d/%d failed for notification %r: HTTP status %s. Response: %s",
                attempt,
                self._max_attempts,
                title,
                status if status is not None else "n/a",
                body[:200],
            )
            if attempt < self._max_attempts:
                _logger.info("Waiting %gs before next attempt...", self._retry_delay)
                await self._sleep(self._retry_delay)

        raise SentinelDeliveryError(
            f"Failed to send notification {title!r} after {self._max_attempts} attempts",
            attempts=self._max_attempts,
            status_code=status,
        )
