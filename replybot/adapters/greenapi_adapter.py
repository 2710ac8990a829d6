"""GreenAPI channel adapter."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from replybot import config
from replybot.adapters.base_channel_adapter import ChannelAdapter, normalize_sender, to_chat_id
from replybot.errors import DispatchError
from replybot.models.incoming_event import IncomingEvent

logger = logging.getLogger(__name__)


class GreenApiAdapter(ChannelAdapter):
    """Adapter for WhatsApp via GreenAPI."""

    name = "greenapi"

    def __init__(
        self,
        base_url: Optional[str] = None,
        instance_id: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.base_url = (base_url or config.GREEN_API_URL).rstrip("/")
        self.instance_id = instance_id or config.GREEN_API_INSTANCE_ID
        self.token = token or config.GREEN_API_TOKEN
        self.transport = transport
        self.timeout = timeout

    def can_handle(self, raw: Dict[str, Any]) -> bool:
        return "typeWebhook" in raw

    async def parse_incoming(self, raw: Dict[str, Any]) -> Optional[IncomingEvent]:
        if raw.get("typeWebhook") != "incomingMessageReceived":
            return None
        message_data = raw.get("messageData") or {}
        if message_data.get("typeMessage") == "textMessage":
            text = (message_data.get("textMessageData") or {}).get("textMessage", "")
        elif message_data.get("typeMessage") == "extendedTextMessage":
            text = (message_data.get("extendedTextMessageData") or {}).get("text", "")
        else:
            return None

        sender_data = raw.get("senderData") or {}
        sender = normalize_sender(sender_data.get("chatId") or sender_data.get("sender") or "")
        text = (text or "").strip()
        if not text or not sender:
            return None
        return IncomingEvent(
            sender_id=sender,
            text=text,
            channel=self.name,
            metadata={"message_id": raw.get("idMessage")},
        )

    async def send_outgoing(self, user_id: str, message: str) -> None:
        if not self.instance_id or not self.token:
            raise DispatchError("GreenAPI instance id and token are required")

        url = f"{self.base_url}/waInstance{self.instance_id}/sendMessage/{self.token}"
        payload = {"chatId": to_chat_id(user_id), "message": message}

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise DispatchError(f"greenapi send to {user_id} failed: {e}") from e

        if response.status_code != 200:
            raise DispatchError(f"greenapi returned {response.status_code}: {response.text}")
        logger.info(f"[GREENAPI] Sent reply to {user_id}")
