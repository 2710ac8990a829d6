import logging
from typing import Optional

import httpx

from ..errors import GenerationError
from .base import DEFAULT_HTTP_TIMEOUT_SECONDS, DEFAULT_TEMPERATURE, LLMProvider

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1"


class GeminiProvider(LLMProvider):
    """Google Gemini REST API (v1 generateContent) over httpx.

    The v1 endpoint has no separate system slot, so the system prompt is
    prepended to the user turn.
    """

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
        self.model = model or "gemini-2.5-flash"
        self.temperature = temperature or DEFAULT_TEMPERATURE
        self.max_tokens = max_tokens or 8192
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)

    def get_provider_name(self) -> str:
        return "Google Gemini"

    async def generate_response(self, system_prompt: str, user_message: str) -> str:
        url = f"{GEMINI_API_BASE}/models/{self.model}:generateContent"
        user_text = f"{system_prompt}\n\n{user_message}" if system_prompt else user_message
        payload = {
            "contents": [{"role": "user", "parts": [{"text": user_text}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }

        try:
            response = await self.client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            raise GenerationError(f"gemini request failed: {e}") from e

        if response.status_code != 200:
            raise GenerationError(
                f"gemini error (model: {self.model}, status: {response.status_code}): {response.text}"
            )

        try:
            candidates = response.json().get("candidates") or []
            logger.debug(f"[GEMINI] candidates={len(candidates)}")
            parts = candidates[0].get("content", {}).get("parts") if candidates else None
            text = parts[0].get("text", "") if parts else None
        except (AttributeError, TypeError, KeyError, IndexError, ValueError) as e:
            raise GenerationError(f"failed to parse gemini response: {e}") from e

        if text is None:
            raise GenerationError(f"no response from Gemini (candidates: {len(candidates)})")
        return text

    async def aclose(self) -> None:
        await self.client.aclose()
