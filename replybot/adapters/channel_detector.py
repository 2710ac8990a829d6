"""Channel detection for incoming webhooks.

Determines which adapter should handle a payload based on minimal markers.
"""
from typing import Any, Dict


def detect_channel(body: Dict[str, Any]) -> str:
    """Detect channel identifier from webhook body.

    Returns one of: 'waha', 'greenapi'.
    Raises ValueError if the channel cannot be determined.
    """
    # GreenAPI tags every webhook with its type
    if "typeWebhook" in body:
        return "greenapi"

    # WAHA wraps the message in session/payload
    if "session" in body and "payload" in body:
        return "waha"

    raise ValueError("Unknown channel for payload")
