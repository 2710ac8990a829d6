from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class ConversationRecord:
    """One request/response exchange, handed to the logging sink after a reply is sent."""
    client_id: str
    sender_id: str
    request_text: str
    response_text: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
