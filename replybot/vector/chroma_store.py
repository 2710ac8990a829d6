"""
ChromaDB persistent collections.

chromadb is synchronous, so every call runs in a worker thread. Distances
from a cosine-space collection are turned back into similarity scores
(score = 1 - distance) so callers see the same scale as Qdrant.
"""

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

from .. import config
from .store import VectorProviderType, VectorStore, VectorStoreError
from .types import CollectionInfo, Condition, Filter, Point, ScoredPoint

logger = logging.getLogger(__name__)


def _condition_to_where(cond: Condition) -> Dict[str, Any]:
    if cond.range is not None:
        ops = {"gte": "$gte", "gt": "$gt", "lte": "$lte", "lt": "$lt"}
        clauses = [{cond.key: {ops[k]: v}} for k, v in cond.range.to_dict().items()]
        return clauses[0] if len(clauses) == 1 else {"$and": clauses}
    return {cond.key: {"$eq": cond.match}}


def filter_to_where(flt: Optional[Filter]) -> Optional[Dict[str, Any]]:
    """Translate a Filter into a Chroma where clause (None when empty)."""
    if flt is None or flt.is_empty():
        return None

    clauses = [_condition_to_where(c) for c in flt.must]
    if flt.should:
        should = [_condition_to_where(c) for c in flt.should]
        clauses.append(should[0] if len(should) == 1 else {"$or": should})
    for cond in flt.must_not:
        if cond.range is not None:
            raise ValueError("range conditions are not supported in must_not for chroma")
        clauses.append({cond.key: {"$ne": cond.match}})

    return clauses[0] if len(clauses) == 1 else {"$and": clauses}


def _clean_metadata(payload: Dict[str, Any]) -> Dict[str, Any]:
    # Chroma metadata values must be scalars
    return {
        k: v if isinstance(v, (str, int, float, bool)) else str(v)
        for k, v in payload.items()
        if v is not None
    }


class ChromaStore(VectorStore):
    def __init__(self, persist_dir: Optional[str] = None, client=None):
        self.persist_dir = persist_dir or config.CHROMA_PERSIST_DIR
        self.client = client

    @property
    def provider_type(self) -> VectorProviderType:
        return VectorProviderType.CHROMA

    async def _run(self, func, *args, **kwargs):
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except VectorStoreError:
            raise
        except Exception as e:
            raise VectorStoreError(f"chroma error: {e}") from e

    def _get_client(self):
        if self.client is None:
            import chromadb

            os.makedirs(self.persist_dir, exist_ok=True)
            self.client = chromadb.PersistentClient(path=self.persist_dir)
        return self.client

    def _collection(self, name: str):
        return self._get_client().get_or_create_collection(
            name=name,
            metadata={"hnsw:space": "cosine"},
        )

    async def initialize(self) -> None:
        await self._run(self._get_client)
        logger.info(f"[VECTOR] Opened ChromaDB at {self.persist_dir}")

    async def create_collection(self, name: str, vector_size: int) -> None:
        def _create():
            self._get_client().get_or_create_collection(
                name=name,
                metadata={"hnsw:space": "cosine", "vector_size": vector_size},
            )

        await self._run(_create)
        logger.info(f"[VECTOR] Created collection '{name}' ({vector_size}d)")

    async def delete_collection(self, name: str) -> None:
        await self._run(lambda: self._get_client().delete_collection(name))

    async def upsert(self, collection: str, points: List[Point]) -> None:
        if not points:
            return

        def _upsert():
            self._collection(collection).upsert(
                ids=[p.id for p in points],
                embeddings=[p.vector for p in points],
                documents=[str(p.payload.get("text", "")) for p in points],
                metadatas=[_clean_metadata(p.payload) for p in points],
            )

        await self._run(_upsert)

    async def search(
        self,
        collection: str,
        vector: List[float],
        limit: int,
        filter: Optional[Filter] = None,
    ) -> List[ScoredPoint]:
        where = filter_to_where(filter)

        def _query():
            kwargs = dict(
                query_embeddings=[vector],
                n_results=limit,
                include=["metadatas", "distances"],
            )
            if where:
                kwargs["where"] = where
            return self._collection(collection).query(**kwargs)

        results = await self._run(_query)

        parsed = []
        if results and results["ids"] and results["ids"][0]:
            for i, point_id in enumerate(results["ids"][0]):
                parsed.append(ScoredPoint(
                    id=point_id,
                    score=1.0 - float(results["distances"][0][i]),
                    payload=dict(results["metadatas"][0][i] or {}),
                ))
        return parsed

    async def delete(self, collection: str, ids: List[str]) -> None:
        if not ids:
            return
        await self._run(lambda: self._collection(collection).delete(ids=list(ids)))

    async def get_collection_info(self, name: str) -> CollectionInfo:
        def _info():
            coll = self._get_client().get_collection(name)
            metadata = coll.metadata or {}
            return CollectionInfo(
                name=name,
                vector_size=int(metadata.get("vector_size", 0)),
                points_count=coll.count(),
                status="green",
            )

        return await self._run(_info)

    async def close(self) -> None:
        self.client = None
