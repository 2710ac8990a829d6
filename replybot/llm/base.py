"""Abstract base interface for generation providers.

Providers turn (system prompt, user message) into reply text. Vendor wire
formats stay inside the concrete classes.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

# Transport-level timeout each provider applies to its own HTTP client.
# The engine's deadline is shorter and wins via task cancellation.
DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0
DEFAULT_TEMPERATURE = 0.7


class LLMProvider(ABC):
    """Base contract for all generation backends."""

    model: str
    temperature: float
    max_tokens: int

    @abstractmethod
    async def generate_response(self, system_prompt: str, user_message: str) -> str:
        """Generate a reply.

        Must be safe to cancel at any await point: cancellation is how the
        caller enforces its deadline.

        Raises:
            GenerationError: transport failure, non-success status, or empty reply.
        """
        raise NotImplementedError

    @abstractmethod
    def get_provider_name(self) -> str:
        """Human-readable provider name used in logs."""
        raise NotImplementedError

    @property
    def provider_name(self) -> str:
        return self.get_provider_name()

    async def aclose(self) -> None:
        """Release transport resources. Default: nothing to release."""
        return None
