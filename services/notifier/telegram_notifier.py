"""Operator notifications over the Telegram Bot API.

Delivery is best effort: every failure is logged and reported as ``False``,
never raised, so a broken notification channel cannot fail an upload.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class Notifier(ABC):
    """Common interface for operator notification channels."""

    @abstractmethod
    async def notify_photo(self, image: bytes, caption: str) -> bool:
        """Send a still image with a caption."""

    @abstractmethod
    async def notify_video(self, video: bytes, caption: str) -> bool:
        """Send a short clip with a caption."""

    async def aclose(self) -> None:
        return None


class DisabledNotifier(Notifier):
    """Used when no channel is configured; logs and reports non-delivery."""

    async def notify_photo(self, image: bytes, caption: str) -> bool:
        logger.info("Notifier disabled; skipping photo alert: %s", caption)
        return False

    async def notify_video(self, video: bytes, caption: str) -> bool:
        logger.info("Notifier disabled; skipping video alert: %s", caption)
        return False


class TelegramNotifier(Notifier):
    """Send photos and videos to one chat via ``sendPhoto`` / ``sendVideo``.

    Args:
        bot_token: Telegram bot token.
        chat_id: Target chat id.
        timeout_seconds: Per-request bound.
        client: Optional shared ``httpx.AsyncClient``; one is created otherwise.
    """

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        timeout_seconds: float = 20.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not bot_token or not chat_id:
            raise ValueError("Telegram bot token and chat id are required.")
        self._chat_id = chat_id
        self._base_url = f"{TELEGRAM_API_URL}/bot{bot_token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._timeout = timeout_seconds

    async def notify_photo(self, image: bytes, caption: str) -> bool:
        return await self._send("sendPhoto", "photo", ("frame.jpg", image, "image/jpeg"), caption)

    async def notify_video(self, video: bytes, caption: str) -> bool:
        return await self._send("sendVideo", "video", ("clip.mp4", video, "video/mp4"), caption)

    async def _send(self, method: str, field: str, upload: tuple, caption: str) -> bool:
        try:
            response = await self._client.post(
                f"{self._base_url}/{method}",
                data={"chat_id": self._chat_id, "caption": caption},
                files={field: upload},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning("Telegram %s failed: %s", method, exc)
            return False
        if response.status_code >= 400:
            logger.warning("Telegram %s rejected: %s %s", method, response.status_code, response.text[:200])
            return False
        logger.info("Telegram %s delivered: %s", method, caption)
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def build_notifier(
    bot_token: Optional[str],
    chat_id: Optional[str],
    *,
    timeout_seconds: float = 20.0,
    client: Optional[httpx.AsyncClient] = None,
) -> Notifier:
    """Return a Telegram notifier when configured, otherwise a disabled one."""
    if bot_token and chat_id:
        return TelegramNotifier(bot_token, chat_id, timeout_seconds=timeout_seconds, client=client)
    logger.warning("TELEGRAM_BOT_TOKEN/TELEGRAM_CHAT_ID not set; operator alerts are disabled")
    return DisabledNotifier()
