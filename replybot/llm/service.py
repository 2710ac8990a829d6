import asyncio
import logging
from typing import Optional

from ..errors import GenerationError
from .base import LLMProvider

logger = logging.getLogger(__name__)


class LLMService:
    """Runs the active provider under the caller's deadline.

    asyncio.wait_for cancels the provider coroutine when the deadline
    passes, which aborts the in-flight HTTP request. The provider's own
    transport timeout only matters when it is shorter.
    """

    def __init__(self, provider: LLMProvider):
        self.provider = provider

    def get_provider_name(self) -> str:
        return self.provider.get_provider_name()

    async def generate_response(
        self,
        system_prompt: str,
        user_message: str,
        timeout: Optional[float] = None,
    ) -> str:
        """Generate a reply, bounded by timeout seconds when given.

        Raises:
            GenerationError: provider failure or deadline exceeded.
        """
        call = self.provider.generate_response(system_prompt, user_message)
        try:
            if timeout is None:
                reply = await call
            else:
                reply = await asyncio.wait_for(call, timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"[LLM] {self.get_provider_name()} did not answer within {timeout:.1f}s"
            )
            raise GenerationError(f"generation timed out after {timeout:.1f}s") from None
        except GenerationError:
            raise
        except Exception as e:
            logger.exception(f"[LLM] {self.get_provider_name()} raised unexpectedly")
            raise GenerationError(f"{self.get_provider_name()} failed: {e}") from e

        if reply is not None and not isinstance(reply, str):
            raise GenerationError(f"{self.get_provider_name()} returned a non-text reply")
        return reply

    async def aclose(self) -> None:
        await self.provider.aclose()
