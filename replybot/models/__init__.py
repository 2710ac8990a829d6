from replybot.models.conversation import ConversationRecord
from replybot.models.incoming_event import IncomingEvent
from replybot.models.knowledge import FAQ, KnowledgeSnapshot, Product, RawEntry, SearchResult
from replybot.models.tenant import TenantContext

__all__ = [
    "ConversationRecord",
    "FAQ",
    "IncomingEvent",
    "KnowledgeSnapshot",
    "Product",
    "RawEntry",
    "SearchResult",
    "TenantContext",
]
