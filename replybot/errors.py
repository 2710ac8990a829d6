"""Failure taxonomy for the reply pipeline.

Throttle rejections are not errors: the rate limiter just answers False.
Everything else that can stop (or degrade) an event maps to one class here.
"""

# Fixed strings shown to the sender. Raw errors never leave the process.
APOLOGY_MESSAGE = "Maaf, sistem sedang bermasalah."
FALLBACK_REPLY = "Maaf, saya sedang tidak bisa menjawab saat ini."


class TenantResolutionError(Exception):
    """Raised when a sender cannot be mapped to an active tenant."""
    pass


class RetrievalError(Exception):
    """Raised when the knowledge base for a tenant cannot be loaded."""
    pass


class GenerationError(Exception):
    """Raised by LLM providers on transport errors, timeouts and empty replies."""
    pass


class DispatchError(Exception):
    """Raised when a reply cannot be delivered to the sender."""
    pass


class ConversationLogError(Exception):
    """Raised when a conversation record cannot be persisted."""
    pass
