"""Outbound notification ports for real-time delivery."""

from __future__ import annotations

import asyncio
from typing import Any, Protocol

import httpx
import structlog

from greda_gbc.config import Settings

logger = structlog.get_logger()


class NotificationDeliveryError(Exception):
    """Raised when a notification cannot be delivered."""


class NotificationPort(Protocol):
    """Transport that pushes a stored notification to a connected user.

    ``send`` hands the payload off and returns; it must not wait on the
    network while a request is being served.
    """

    def send(self, user_id: str, payload: dict[str, Any]) -> None: ...

    async def aclose(self) -> None: ...


class NullNotificationPort:
    """Port for callers that do not need real-time push."""

    def send(self, user_id: str, payload: dict[str, Any]) -> None:
        return None

    async def aclose(self) -> None:
        return None


class WebhookNotificationPort:
    """Posts notifications as JSON to an HTTP relay (e.g. a websocket gateway).

    Inside a running event loop each push is scheduled as a task and the
    caller returns immediately; failures are logged when the task finishes.
    Without a running loop the push is delivered before ``send`` returns.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def deliver(self, user_id: str, payload: dict[str, Any]) -> None:
        """POST one notification to the relay."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(self.url, json={"user_id": user_id, **payload})
            except httpx.HTTPError as exc:
                raise NotificationDeliveryError(f"Webhook unreachable: {exc}") from exc
        if response.status_code >= 400:
            raise NotificationDeliveryError(
                f"Webhook rejected notification: {response.status_code} {response.text[:200]}"
            )
        logger.debug("notification_pushed", user_id=user_id, status_code=response.status_code)

    def send(self, user_id: str, payload: dict[str, Any]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.deliver(user_id, payload))
            return
        task = loop.create_task(self.deliver(user_id, payload))
        self._pending.add(task)
        task.add_done_callback(self._on_delivered)

    def _on_delivered(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning("notification_delivery_failed", url=self.url, error=str(exc))

    async def aclose(self) -> None:
        """Wait for in-flight pushes to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


def build_notification_port(settings: Settings) -> NotificationPort:
    """Select the notification transport from settings."""
    if settings.notification_webhook_url:
        return WebhookNotificationPort(
            settings.notification_webhook_url,
            timeout=settings.notification_timeout_seconds,
        )
    return NullNotificationPort()
