"""WAHA (WhatsApp HTTP API) channel adapter."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from replybot import config
from replybot.adapters.base_channel_adapter import ChannelAdapter, normalize_sender, to_chat_id
from replybot.errors import DispatchError
from replybot.models.incoming_event import IncomingEvent

logger = logging.getLogger(__name__)


class WahaAdapter(ChannelAdapter):
    """Adapter for WhatsApp via a WAHA server."""

    name = "waha"

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        session: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = (base_url or config.WAHA_BASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else config.WAHA_API_KEY
        self.session = session or config.WAHA_SESSION_ID
        self.transport = transport
        self.timeout = timeout

    def can_handle(self, raw: Dict[str, Any]) -> bool:
        return "session" in raw and "payload" in raw

    async def parse_incoming(self, raw: Dict[str, Any]) -> Optional[IncomingEvent]:
        if raw.get("event") not in ("message", "message.any"):
            return None
        payload = raw.get("payload") or {}
        if payload.get("fromMe"):
            return None
        body = (payload.get("body") or "").strip()
        sender = normalize_sender(payload.get("from") or "")
        if not body or not sender:
            return None
        return IncomingEvent(
            sender_id=sender,
            text=body,
            channel=self.name,
            metadata={"session": raw.get("session"), "message_id": payload.get("id")},
        )

    async def send_outgoing(self, user_id: str, message: str) -> None:
        url = f"{self.base_url}/api/sendText"
        payload = {"session": self.session, "chatId": to_chat_id(user_id), "text": message}
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise DispatchError(f"waha send to {user_id} failed: {e}") from e

        if response.status_code not in (200, 201):
            raise DispatchError(f"waha returned {response.status_code}: {response.text}")
        logger.info(f"[WAHA] Sent reply to {user_id} ({response.status_code})")
