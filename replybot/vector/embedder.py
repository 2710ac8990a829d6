"""
Embedding providers used by the vector knowledge base.

OpenAI goes through the official SDK; Gemini through its REST API with httpx.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

import httpx
import openai
from openai import AsyncOpenAI

from .. import config
from .store import VectorStoreError

logger = logging.getLogger(__name__)

OPENAI_EMBEDDING_DIMENSIONS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}
DEFAULT_OPENAI_MODEL = "text-embedding-3-small"

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_GEMINI_MODEL = "text-embedding-004"
GEMINI_EMBEDDING_DIMENSIONS = 768


class EmbeddingError(VectorStoreError):
    """Raised when an embedding request fails."""
    pass


class Embedder(ABC):
    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        ...

    @abstractmethod
    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        ...

    @abstractmethod
    def dimensions(self) -> int:
        ...

    @abstractmethod
    def name(self) -> str:
        ...

    async def close(self) -> None:
        pass


class OpenAIEmbedder(Embedder):
    def __init__(self, api_key: str, model: Optional[str] = None, client: Optional[AsyncOpenAI] = None):
        self.model = model or DEFAULT_OPENAI_MODEL
        self.client = client or AsyncOpenAI(api_key=api_key)

    def dimensions(self) -> int:
        return OPENAI_EMBEDDING_DIMENSIONS.get(self.model, 1536)

    def name(self) -> str:
        return f"OpenAI ({self.model})"

    async def embed(self, text: str) -> List[float]:
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            response = await self.client.embeddings.create(model=self.model, input=texts)
        except openai.OpenAIError as e:
            raise EmbeddingError(f"openai embedding failed: {e}") from e

        embeddings = [item.embedding for item in response.data]
        if len(embeddings) != len(texts):
            raise EmbeddingError(f"expected {len(texts)} embeddings, got {len(embeddings)}")
        logger.debug(f"[EMBEDDER] Generated {len(embeddings)} embeddings ({self.model})")
        return embeddings

    async def close(self) -> None:
        await self.client.close()


class GeminiEmbedder(Embedder):
    def __init__(self, api_key: str, model: Optional[str] = None, client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key
        self.model = model or DEFAULT_GEMINI_MODEL
        self.client = client or httpx.AsyncClient(timeout=30.0)

    def dimensions(self) -> int:
        return GEMINI_EMBEDDING_DIMENSIONS

    def name(self) -> str:
        return f"Google Gemini ({self.model})"

    async def _post(self, method: str, payload: dict) -> dict:
        url = f"{GEMINI_API_BASE}/models/{self.model}:{method}"
        try:
            response = await self.client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            raise EmbeddingError(f"gemini embedding request failed: {e}") from e
        if response.status_code != 200:
            raise EmbeddingError(f"gemini embedding returned {response.status_code}: {response.text}")
        try:
            return response.json()
        except ValueError as e:
            raise EmbeddingError(f"failed to parse gemini embedding response: {e}") from e

    def _request(self, text: str) -> dict:
        return {"model": f"models/{self.model}", "content": {"parts": [{"text": text}]}}

    async def embed(self, text: str) -> List[float]:
        data = await self._post("embedContent", self._request(text))
        try:
            values = (data.get("embedding") or {}).get("values")
        except AttributeError as e:
            raise EmbeddingError(f"unexpected gemini embedding response: {e}") from e
        if not values:
            raise EmbeddingError("gemini returned no embedding")
        return values

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        data = await self._post("batchEmbedContents", {"requests": [self._request(t) for t in texts]})
        try:
            embeddings = [e.get("values") for e in data.get("embeddings") or []]
        except (AttributeError, TypeError) as e:
            raise EmbeddingError(f"unexpected gemini embedding response: {e}") from e
        if len(embeddings) != len(texts) or not all(embeddings):
            raise EmbeddingError(f"expected {len(texts)} embeddings, got {len(embeddings)}")
        return embeddings

    async def close(self) -> None:
        await self.client.aclose()


def new_embedder(provider: str, api_key: str, model: Optional[str] = None) -> Embedder:
    provider = (provider or "").strip().lower()
    if not api_key:
        raise ValueError(f"{provider} embedding API key is required")
    if provider == "openai":
        return OpenAIEmbedder(api_key, model)
    if provider == "gemini":
        return GeminiEmbedder(api_key, model)
    raise ValueError(f"unsupported embedding provider: {provider}")


def load_embedder_from_env() -> Embedder:
    provider = (config.EMBEDDING_PROVIDER or "openai").lower()
    api_key = config.GEMINI_API_KEY if provider == "gemini" else config.OPENAI_API_KEY
    return new_embedder(provider, api_key, config.EMBEDDING_MODEL)
