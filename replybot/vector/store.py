"""
Vector store interface and factory.

Concrete stores: Qdrant (cloud or self-hosted, REST over httpx) and a local
persistent ChromaDB collection.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from .types import CollectionInfo, Filter, Point, ScoredPoint

logger = logging.getLogger(__name__)


class VectorStoreError(Exception):
    """Raised by vector stores on transport or backend errors."""
    pass


class VectorProviderType(str, Enum):
    QDRANT_CLOUD = "qdrant_cloud"
    QDRANT_SELF_HOSTED = "qdrant_self_hosted"
    CHROMA = "chroma"


class VectorStore(ABC):
    """Async vector database interface. Similarity is cosine; higher is closer."""

    @abstractmethod
    async def initialize(self) -> None:
        """Check connectivity / open the backing storage."""

    @abstractmethod
    async def create_collection(self, name: str, vector_size: int) -> None:
        ...

    @abstractmethod
    async def delete_collection(self, name: str) -> None:
        ...

    @abstractmethod
    async def upsert(self, collection: str, points: List[Point]) -> None:
        """Insert or replace points by id."""

    @abstractmethod
    async def search(
        self,
        collection: str,
        vector: List[float],
        limit: int,
        filter: Optional[Filter] = None,
    ) -> List[ScoredPoint]:
        """Return up to limit points ordered by descending score."""

    @abstractmethod
    async def delete(self, collection: str, ids: List[str]) -> None:
        ...

    @abstractmethod
    async def get_collection_info(self, name: str) -> CollectionInfo:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @property
    @abstractmethod
    def provider_type(self) -> VectorProviderType:
        ...


def new_vector_store(
    provider_type: str,
    url: Optional[str] = None,
    api_key: Optional[str] = None,
    persist_dir: Optional[str] = None,
) -> VectorStore:
    """Create a vector store for the given provider.

    Args:
        provider_type: "qdrant_cloud", "qdrant_self_hosted" or "chroma".
        url: Qdrant base URL.
        api_key: Qdrant Cloud API key (required for qdrant_cloud).
        persist_dir: ChromaDB storage directory.

    Raises:
        ValueError: unknown provider or missing settings.
    """
    try:
        kind = VectorProviderType((provider_type or "").strip().lower())
    except ValueError:
        raise ValueError(f"unsupported vector provider: {provider_type}") from None

    if kind is VectorProviderType.CHROMA:
        from .chroma_store import ChromaStore
        return ChromaStore(persist_dir=persist_dir)

    from .qdrant_store import QdrantStore
    if not url:
        raise ValueError(f"{kind.value} requires a URL")
    if kind is VectorProviderType.QDRANT_CLOUD and not api_key:
        raise ValueError("qdrant_cloud requires an API key")
    return QdrantStore(
        url=url,
        api_key=api_key if kind is VectorProviderType.QDRANT_CLOUD else None,
        kind=kind,
    )
