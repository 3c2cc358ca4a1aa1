"""Outbound Bot API calls over httpx."""

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Protocol

import httpx

from ..config import DEFAULT_API_URL
from ..logging_config import get_logger

logger = get_logger(__name__)

ReplyMarkup = dict[str, Any]


class ISender(Protocol):
    """Send capability bound to update contexts. Fire-and-forget."""

    async def send_message(
        self,
        chat_id: int,
        text: str,
        parse_mode: str | None = None,
        reply_markup: ReplyMarkup | None = None,
    ) -> None:
        """Send a text message."""
        ...

    async def send_location(self, chat_id: int, lat: float, lng: float) -> None:
        """Send a point on the map."""
        ...

    async def send_photo(self, chat_id: int, path: str) -> None:
        """Upload a photo from a local file."""
        ...

    async def answer_callback_query(self, callback_query_id: str, text: str) -> None:
        """Acknowledge a button press."""
        ...


class TelegramSender:
    """Telegram Bot API sender."""

    def __init__(
        self,
        token: str | None = None,
        api_url: str = DEFAULT_API_URL,
        client: httpx.AsyncClient | None = None,
    ):
        self._token = token or os.getenv("TELEGRAM_BOT_TOKEN")
        if not self._token:
            raise ValueError("TELEGRAM_BOT_TOKEN environment variable not set")

        self._client = client or httpx.AsyncClient(timeout=30.0)
        self._owns_client = client is None
        self._base_url = f"{api_url.rstrip('/')}/bot{self._token}"

    async def close(self) -> None:
        """Close the HTTP client if this sender created it."""
        if self._owns_client:
            await self._client.aclose()

    async def send_message(
        self,
        chat_id: int,
        text: str,
        parse_mode: str | None = None,
        reply_markup: ReplyMarkup | None = None,
    ) -> None:
        """Send a text message."""
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        await self._call("sendMessage", json_body=payload)

    async def send_location(self, chat_id: int, lat: float, lng: float) -> None:
        """Send a point on the map."""
        await self._call(
            "sendLocation",
            json_body={"chat_id": chat_id, "latitude": lat, "longitude": lng},
        )

    async def send_photo(self, chat_id: int, path: str) -> None:
        """Upload a photo from a local file."""
        photo_path = Path(path)
        try:
            content = await asyncio.to_thread(photo_path.read_bytes)
        except OSError as e:
            logger.error("Cannot read photo %s: %s", path, e)
            return
        await self._call(
            "sendPhoto",
            form={"chat_id": str(chat_id)},
            files={"photo": (photo_path.name, content)},
        )

    async def answer_callback_query(self, callback_query_id: str, text: str) -> None:
        """Acknowledge a button press."""
        await self._call(
            "answerCallbackQuery",
            json_body={"callback_query_id": callback_query_id, "text": text},
        )

    async def _call(
        self,
        method: str,
        json_body: dict | None = None,
        form: dict | None = None,
        files: dict | None = None,
    ) -> dict | None:
        """POST a Bot API method. Failures are logged, never raised."""
        url = f"{self._base_url}/{method}"
        try:
            if files is not None:
                response = await self._client.post(url, data=form, files=files)
            else:
                response = await self._client.post(url, json=json_body)
            body = response.json()
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            logger.error("Bot API %s failed: %s", method, e)
            return None

        if not body.get("ok"):
            logger.warning(
                "Bot API %s rejected: %s",
                method,
                body.get("description", response.status_code),
            )
            return None

        return body.get("result")
