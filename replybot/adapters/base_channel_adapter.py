"""Abstract base interface for channel adapters.

Adapters normalize provider-specific webhook payloads into IncomingEvent
and send replies back through the same provider.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from replybot.models.incoming_event import IncomingEvent

CHAT_ID_SUFFIX = "@c.us"


def normalize_sender(chat_id: str) -> str:
    """'+628123@c.us' -> '628123'."""
    sender = (chat_id or "").strip()
    if sender.endswith(CHAT_ID_SUFFIX):
        sender = sender[: -len(CHAT_ID_SUFFIX)]
    return sender.lstrip("+")


def to_chat_id(user_id: str) -> str:
    """'+628123' -> '628123@c.us'. Ids already carrying a suffix are kept."""
    if "@" in user_id:
        return user_id
    return f"{user_id.lstrip('+')}{CHAT_ID_SUFFIX}"


class ChannelAdapter(ABC):
    """Base adapter contract for all channels."""

    name: str = ""

    @abstractmethod
    def can_handle(self, raw: Dict[str, Any]) -> bool:
        """Quick predicate to check if this adapter can handle the payload."""
        raise NotImplementedError

    @abstractmethod
    async def parse_incoming(self, raw: Dict[str, Any]) -> Optional[IncomingEvent]:
        """Parse a webhook payload into an IncomingEvent.

        Return None for payloads that are not actionable: delivery receipts,
        our own outgoing messages, non-text messages.
        """
        raise NotImplementedError

    @abstractmethod
    async def send_outgoing(self, user_id: str, message: str) -> None:
        """Send a text reply to the user.

        Raises:
            DispatchError: the provider did not accept the message.
        """
        raise NotImplementedError
