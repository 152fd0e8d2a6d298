"""Outbound event notifications over HTTP.

Each message is POSTed once to ``{api_url}/notify`` as ``{"message": ...}``.
Delivery runs as a background task; the caller never waits for it and a
failure is only logged.
"""

import asyncio
import logging

import httpx

from utils.errors import NotificationError

logger = logging.getLogger(__name__)


class Notifier:
    """Best-effort, at-most-once notification dispatcher."""

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._pending: set[asyncio.Task] = set()
        self.sent_count = 0
        self.failed_count = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    def notify(self, message: str) -> None:
        """Queue a message for delivery and return immediately."""
        task = asyncio.get_running_loop().create_task(self._send(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, message: str) -> None:
        try:
            response = await self._get_client().post(
                f"{self.api_url}/notify", json={"message": message}
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            self.failed_count += 1
            logger.error(str(NotificationError(message, e)))
            return
        self.sent_count += 1
        logger.info(f"Notification sent: {message}")

    async def drain(self) -> None:
        """Wait for in-flight deliveries."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """Finish in-flight deliveries and close the HTTP client."""
        await self.drain()
        if self._client:
            await self._client.aclose()
            self._client = None
