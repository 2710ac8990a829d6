"""
Qdrant REST client.

Qdrant only accepts UUIDs or unsigned integers as point ids, so string ids
are mapped to a deterministic UUIDv5 and the caller's id is kept in the
payload under POINT_ID_KEY. Upserting the same string id twice therefore
replaces the point instead of duplicating it.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

import httpx

from .store import VectorProviderType, VectorStore, VectorStoreError
from .types import CollectionInfo, Condition, Filter, Point, ScoredPoint

logger = logging.getLogger(__name__)

POINT_ID_KEY = "point_id"
_ID_NAMESPACE = uuid.NAMESPACE_URL
DEFAULT_TIMEOUT_SECONDS = 30.0


def to_qdrant_id(point_id: str) -> str:
    try:
        return str(uuid.UUID(point_id))
    except ValueError:
        return str(uuid.uuid5(_ID_NAMESPACE, point_id))


def _condition_to_dict(cond: Condition) -> Dict[str, Any]:
    if cond.range is not None:
        return {"key": cond.key, "range": cond.range.to_dict()}
    return {"key": cond.key, "match": {"value": cond.match}}


def filter_to_dict(flt: Filter) -> Dict[str, Any]:
    body = {}
    if flt.must:
        body["must"] = [_condition_to_dict(c) for c in flt.must]
    if flt.should:
        body["should"] = [_condition_to_dict(c) for c in flt.should]
    if flt.must_not:
        body["must_not"] = [_condition_to_dict(c) for c in flt.must_not]
    return body


class QdrantStore(VectorStore):
    def __init__(
        self,
        url: str,
        api_key: Optional[str] = None,
        kind: VectorProviderType = VectorProviderType.QDRANT_SELF_HOSTED,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url.rstrip("/")
        self._kind = kind
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["api-key"] = api_key
        self.client = client or httpx.AsyncClient(base_url=self.url, headers=headers, timeout=timeout)

    @property
    def provider_type(self) -> VectorProviderType:
        return self._kind

    async def _request(self, method: str, path: str, body: Optional[dict] = None) -> Dict[str, Any]:
        try:
            response = await self.client.request(method, path, json=body)
        except httpx.HTTPError as e:
            raise VectorStoreError(f"qdrant request {method} {path} failed: {e}") from e
        if response.status_code >= 300:
            raise VectorStoreError(
                f"qdrant {method} {path} returned {response.status_code}: {response.text}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise VectorStoreError(f"qdrant {method} {path} returned invalid JSON") from e

    async def initialize(self) -> None:
        await self._request("GET", "/collections")
        logger.info(f"[VECTOR] Connected to Qdrant at {self.url} ({self._kind.value})")

    async def create_collection(self, name: str, vector_size: int) -> None:
        body = {"vectors": {"size": vector_size, "distance": "Cosine"}}
        await self._request("PUT", f"/collections/{name}", body)
        logger.info(f"[VECTOR] Created collection '{name}' ({vector_size}d)")

    async def delete_collection(self, name: str) -> None:
        await self._request("DELETE", f"/collections/{name}")

    async def upsert(self, collection: str, points: List[Point]) -> None:
        if not points:
            return
        body = {
            "points": [
                {
                    "id": to_qdrant_id(p.id),
                    "vector": p.vector,
                    "payload": {**p.payload, POINT_ID_KEY: p.id},
                }
                for p in points
            ]
        }
        await self._request("PUT", f"/collections/{collection}/points?wait=true", body)

    async def search(
        self,
        collection: str,
        vector: List[float],
        limit: int,
        filter: Optional[Filter] = None,
    ) -> List[ScoredPoint]:
        body: Dict[str, Any] = {"vector": vector, "limit": limit, "with_payload": True}
        if filter is not None and not filter.is_empty():
            body["filter"] = filter_to_dict(filter)
        data = await self._request("POST", f"/collections/{collection}/points/search", body)

        results = []
        for hit in data.get("result") or []:
            payload = dict(hit.get("payload") or {})
            point_id = payload.pop(POINT_ID_KEY, None) or str(hit.get("id"))
            results.append(ScoredPoint(id=point_id, score=float(hit.get("score", 0.0)), payload=payload))
        return results

    async def delete(self, collection: str, ids: List[str]) -> None:
        if not ids:
            return
        body = {"points": [to_qdrant_id(i) for i in ids]}
        await self._request("POST", f"/collections/{collection}/points/delete?wait=true", body)

    async def get_collection_info(self, name: str) -> CollectionInfo:
        data = await self._request("GET", f"/collections/{name}")
        result = data.get("result") or {}
        vectors = result.get("config", {}).get("params", {}).get("vectors", {})
        return CollectionInfo(
            name=name,
            vector_size=int(vectors.get("size", 0)),
            points_count=int(result.get("points_count") or 0),
            status=result.get("status", "unknown"),
        )

    async def close(self) -> None:
        await self.client.aclose()
