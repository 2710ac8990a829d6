"""Adapters package entry.

Provides a factory to obtain adapters by channel string.
"""
from typing import Dict

from replybot.adapters.base_channel_adapter import ChannelAdapter
from replybot.adapters.channel_detector import detect_channel
from replybot.adapters.greenapi_adapter import GreenApiAdapter
from replybot.adapters.waha_adapter import WahaAdapter


_ADAPTERS: Dict[str, ChannelAdapter] = {
    "waha": WahaAdapter(),
    "greenapi": GreenApiAdapter(),
}


def get_adapter_for_channel(channel: str) -> ChannelAdapter:
    """Return a singleton adapter instance for the given channel."""
    adapter = _ADAPTERS.get(channel)
    if adapter is None:
        raise ValueError(f"No adapter for channel: {channel}")
    return adapter


__all__ = [
    "ChannelAdapter",
    "GreenApiAdapter",
    "WahaAdapter",
    "detect_channel",
    "get_adapter_for_channel",
]
