"""Webhook chat backend.

Posts each message to an automation webhook (an n8n "chat" workflow or
anything speaking the same shape) and reads the agent's answer back.

Request body::

    {"chatInput": "<text>", "sessionId": "<session id>"}

The workflow keeps conversation memory keyed by ``sessionId``. Agents return
their answer under different keys depending on how the workflow ends, so the
first of ``output``, ``text``, ``response`` and ``message`` is used. A bare
JSON string is taken as the answer; any other payload is passed back
re-serialized.
"""

import json
import logging
from typing import Optional

import httpx

from ..backend import ChatBackend
from ..config import get_webhook_timeout, get_webhook_url
from ..core import ChatReply

logger = logging.getLogger(__name__)

REPLY_KEYS = ("output", "text", "response", "message")


def extract_reply_text(data) -> str:
    """Pull the answer text out of a decoded webhook payload."""
    if isinstance(data, str):
        return data
    if isinstance(data, dict):
        for key in REPLY_KEYS:
            value = data.get(key)
            if value:
                return value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


class WebhookBackend(ChatBackend):
    """Backend for a JSON chat webhook."""

    name = "webhook"

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.url = url or get_webhook_url()
        self.timeout = timeout if timeout is not None else get_webhook_timeout()
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def send(self, text: str, session_id: str) -> ChatReply:
        payload = {"chatInput": text, "sessionId": session_id}
        logger.debug("POST %s session=%s", self.url, session_id)
        try:
            resp = await self._get_client().post(
                self.url,
                json=payload,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error("Webhook request failed: %s", e)
            return ChatReply(error_message=str(e) or "Failed to connect to chat webhook")

        if resp.is_error:
            logger.error("Webhook returned %s", resp.status_code)
            return ChatReply(
                error_message=f"webhook error: {resp.status_code} {resp.reason_phrase}",
            )

        try:
            data = resp.json()
        except ValueError:
            data = resp.text
        return ChatReply(text=extract_reply_text(data))

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
