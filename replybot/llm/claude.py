import logging
from typing import Optional

import httpx

from ..errors import GenerationError
from .base import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_TEMPERATURE, LLMProvider

logger = logging.getLogger(__name__)

CLAUDE_API_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider(LLMProvider):
    """Anthropic Messages API over httpx."""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model or "claude-3-5-sonnet-20241022"
        self.temperature = temperature or DEFAULT_TEMPERATURE
        self.max_tokens = max_tokens or 2048
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def get_provider_name(self) -> str:
        return "Anthropic Claude"

    async def generate_response(self, system_prompt: str, user_message: str) -> str:
        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": user_message}],
        }
        if system_prompt:
            payload["system"] = system_prompt

        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

        try:
            response = await self.client.post(CLAUDE_API_URL, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise GenerationError(f"claude request failed: {e}") from e

        if response.status_code != 200:
            raise GenerationError(
                f"claude error (model: {self.model}, status: {response.status_code}): {response.text}"
            )

        try:
            content = response.json().get("content") or []
            texts = [block.get("text", "") for block in content if block.get("type", "text") == "text"]
        except (AttributeError, TypeError, KeyError, ValueError) as e:
            raise GenerationError(f"failed to parse claude response: {e}") from e

        if not texts:
            raise GenerationError("no response from Claude")
        return texts[0]

    async def aclose(self) -> None:
        await self.client.aclose()
