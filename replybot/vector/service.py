import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .embedder import Embedder
from .store import VectorStore
from .types import CollectionInfo, Filter, Point, ScoredPoint

logger = logging.getLogger(__name__)


@dataclass
class Document:
    id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)


class VectorService:
    """Embeds text and stores/searches it in a VectorStore.

    The stored payload is the document metadata plus its text under "text".
    """

    def __init__(self, store: VectorStore, embedder: Embedder):
        self.store = store
        self.embedder = embedder

    async def create_collection(self, name: str) -> None:
        await self.store.create_collection(name, self.embedder.dimensions())

    async def add_document(
        self,
        collection: str,
        doc_id: str,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        vector = await self.embedder.embed(text)
        payload = {**(metadata or {}), "text": text}
        await self.store.upsert(collection, [Point(id=doc_id, vector=vector, payload=payload)])

    async def add_documents(self, collection: str, documents: List[Document]) -> None:
        if not documents:
            raise ValueError("no documents provided")

        vectors = await self.embedder.embed_batch([d.text for d in documents])
        points = [
            Point(id=d.id, vector=v, payload={**d.metadata, "text": d.text})
            for d, v in zip(documents, vectors)
        ]
        await self.store.upsert(collection, points)
        logger.info(f"[VECTOR] Indexed {len(points)} documents into '{collection}'")

    async def search(
        self,
        collection: str,
        query: str,
        limit: int,
        filter: Optional[Filter] = None,
    ) -> List[ScoredPoint]:
        vector = await self.embedder.embed(query)
        return await self.store.search(collection, vector, limit, filter)

    async def delete_document(self, collection: str, doc_id: str) -> None:
        await self.store.delete(collection, [doc_id])

    async def delete_documents(self, collection: str, doc_ids: List[str]) -> None:
        await self.store.delete(collection, doc_ids)

    async def get_collection_info(self, name: str) -> CollectionInfo:
        return await self.store.get_collection_info(name)

    async def close(self) -> None:
        await self.store.close()
        await self.embedder.close()
