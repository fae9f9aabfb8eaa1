"""
Outbound WhatsApp notifications.

Messages go through a bounded in-process queue drained by a single
background worker, so the request path never waits on delivery. Delivery
is best-effort: a full queue drops the message, a failed send is logged.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

import httpx

from pos_api.core.config import config
from pos_api.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    target: str
    message: str


Sender = Callable[[Notification], Awaitable[None]]


async def send_whatsapp(
    notification: Notification, client: Optional[httpx.AsyncClient] = None
) -> None:
    """
    Send one message through the Fonnte WhatsApp API.

    Args:
        client: Reuse this client instead of opening a new one

    Raises:
        ExternalServiceError: If the API rejects the request
    """
    payload = {"target": notification.target, "message": notification.message}
    headers = {"Authorization": config.fonnte_token}
    if client is None:
        async with httpx.AsyncClient(timeout=10.0) as own_client:
            response = await own_client.post(config.fonnte_url, json=payload, headers=headers)
    else:
        response = await client.post(config.fonnte_url, json=payload, headers=headers)

    if response.status_code != 200:
        raise ExternalServiceError(
            "WhatsApp", f"API returned status {response.status_code}"
        )


class NotificationQueue:
    """Bounded queue with one consumer task."""

    def __init__(
        self,
        sender: Sender,
        maxsize: int = 100,
        enabled: bool = True,
    ) -> None:
        self.sender = sender
        self.enabled = enabled
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._worker: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def enqueue(self, notification: Notification) -> bool:
        """
        Queue a notification without blocking.

        Returns:
            True if queued, False if disabled or dropped
        """
        if not self.enabled:
            logger.debug("Notifications disabled, skipping message")
            return False
        try:
            self._queue.put_nowait(notification)
        except asyncio.QueueFull:
            logger.warning(
                f"Notification queue full ({self._queue.maxsize}), dropping message"
            )
            return False
        return True

    async def _run(self) -> None:
        while True:
            notification = await self._queue.get()
            try:
                await self.sender(notification)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Failed to deliver notification to {notification.target}: {e}")
            finally:
                self._queue.task_done()

    def start(self) -> None:
        """Start the worker on the running loop (called from app lifespan)."""
        if not self.enabled:
            logger.info("WhatsApp notifications not configured, worker not started")
            return
        if self._worker is None or self._worker.done():
            # A queue binds to the loop that first waits on it
            if self._queue.empty():
                self._queue = asyncio.Queue(maxsize=self._queue.maxsize)
            self._worker = asyncio.create_task(self._run())

    async def drain(self) -> None:
        """Wait until every queued notification has been attempted."""
        await self._queue.join()

    async def stop(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None


def format_transaction_message(
    transaction_id: int, status: str, total: str, lines: List[str], timestamp: str
) -> str:
    """Render the 'new transaction' WhatsApp message."""
    message = "NEW TRANSACTION\n\n"
    message += f"ID: #{transaction_id}\n"
    message += f"Status: {status}\n"
    message += f"Total: {total}\n\n"
    message += "*Items:*\n"
    for index, line in enumerate(lines, start=1):
        message += f"{index}. {line}\n"
    message += f"\n_Time: {timestamp}_"
    return message


notification_queue = NotificationQueue(
    sender=send_whatsapp,
    maxsize=config.notification_queue_size,
    enabled=bool(config.fonnte_token and config.notify_target),
)
