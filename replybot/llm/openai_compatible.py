"""
Providers speaking the OpenAI chat-completions wire format.

OpenAI, Groq and DeepSeek share one request/response shape and differ only
in base URL and defaults, so one class covers all three.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import openai
from openai import AsyncOpenAI

from ..errors import GenerationError
from .base import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_TEMPERATURE, LLMProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompatibleBackend:
    name: str
    base_url: Optional[str]
    default_model: str
    default_max_tokens: int


OPENAI = CompatibleBackend("OpenAI", None, "gpt-4o-mini", 300)
GROQ = CompatibleBackend("Groq", "https://api.groq.com/openai/v1", "llama-3.1-8b-instant", 2048)
DEEPSEEK = CompatibleBackend("DeepSeek", "https://api.deepseek.com", "deepseek-chat", 2048)


class OpenAICompatibleProvider(LLMProvider):
    """Chat-completions provider for any OpenAI-compatible endpoint."""

    def __init__(
        self,
        backend: CompatibleBackend,
        api_key: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.backend = backend
        self.model = model or backend.default_model
        self.temperature = temperature or DEFAULT_TEMPERATURE
        self.max_tokens = max_tokens or backend.default_max_tokens
        self.timeout = timeout
        # max_retries=0: a failed call falls back to the canned reply instead.
        self.client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=backend.base_url,
            timeout=timeout,
            max_retries=0,
        )

    def get_provider_name(self) -> str:
        return self.backend.name

    async def generate_response(self, system_prompt: str, user_message: str) -> str:
        try:
            resp = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_message},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except openai.OpenAIError as e:
            raise GenerationError(f"{self.backend.name.lower()} error: {e}") from e

        if not resp.choices:
            raise GenerationError(f"no response from {self.backend.name}")
        return resp.choices[0].message.content or ""

    async def aclose(self) -> None:
        await self.client.close()
