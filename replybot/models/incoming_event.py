"""Inbound event model for channel-agnostic processing.

Channel adapters normalize provider-specific webhook payloads into an
`IncomingEvent`; the engine consumes nothing else. Events are ephemeral:
created per inbound message and discarded once the pipeline finishes.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class IncomingEvent:
    """Normalized inbound text message.

    Attributes:
        sender_id: Sender phone number without '+' or '@c.us' (e.g., '628123').
        text: Raw message text.
        received_at: Arrival timestamp (UTC).
        channel: Logical channel identifier (e.g., 'waha', 'greenapi').
        metadata: Channel-specific metadata preserved for diagnostics.
    """
    sender_id: str
    text: str
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    channel: str = "unknown"
    metadata: Optional[Dict[str, Any]] = None
