"""
Semantic knowledge retriever.

Indexes a tenant's knowledge (FAQs, products, long documents) into a shared
vector collection and pulls back only the entries relevant to the incoming
question. Every point carries client_id in its payload and every search is
filtered on it, so tenants never see each other's documents.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..errors import RetrievalError
from ..llm.prompt_builder import build_system_prompt
from ..models.knowledge import KnowledgeSnapshot, SearchResult
from ..models.tenant import TenantContext
from ..vector.service import VectorService
from ..vector.store import VectorStoreError
from ..vector.types import Filter
from .chunker import DEFAULT_CHUNK_SIZE, DEFAULT_OVERLAP, chunk_document
from .retriever import StructuredRetriever

logger = logging.getLogger(__name__)

MIN_RELEVANCE_SCORE = 0.7
DEFAULT_MAX_RESULTS = 5
CONTEXT_HEADER = "Relevant information from knowledge base:\n\n"


def point_id(client_id: str, doc_type: str, doc_id: str) -> str:
    return f"{client_id}_{doc_type}_{doc_id}"


def format_context(results: List[SearchResult], min_score: float = MIN_RELEVANCE_SCORE) -> str:
    """Render search results above min_score as a numbered context block."""
    lines = []
    for result in results:
        if result.score < min_score:
            continue
        i = len(lines) + 1
        meta = result.metadata
        if result.doc_type == "faq":
            lines.append(f"{i}. Q: {meta.get('question', '')}\n   A: {meta.get('answer', '')}\n\n")
        elif result.doc_type == "product":
            lines.append(
                f"{i}. Product: {meta.get('name', '')}\n"
                f"   Description: {meta.get('description', '')}\n"
                f"   Price: {meta.get('price', '')}\n\n"
            )
        else:
            lines.append(f"{i}. {result.text} (Score: {result.score:.2f})\n\n")

    if not lines:
        return ""
    return CONTEXT_HEADER + "".join(lines)


class VectorRetriever:
    """Knowledge retrieval backed by a VectorService collection."""

    def __init__(
        self,
        service: VectorService,
        structured: StructuredRetriever,
        collection: str = "knowledge_base",
        max_results: int = DEFAULT_MAX_RESULTS,
    ):
        self.service = service
        self.structured = structured
        self.collection = collection
        self.max_results = max_results

    async def initialize(self) -> None:
        """Create the collection, or confirm it already exists."""
        try:
            await self.service.create_collection(self.collection)
            return
        except VectorStoreError as create_error:
            logger.info(f"[VECTOR] Create '{self.collection}' failed ({create_error}); checking if it exists")

        try:
            info = await self.service.get_collection_info(self.collection)
        except VectorStoreError as e:
            raise RetrievalError(f"failed to initialize collection {self.collection}: {e}") from e
        logger.info(f"[VECTOR] Using existing collection '{info.name}' ({info.points_count} points)")

    async def add_document(
        self,
        client_id: str,
        doc_type: str,
        doc_id: str,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        payload = dict(metadata or {})
        payload.update({"client_id": client_id, "doc_type": doc_type, "doc_id": doc_id})
        await self.service.add_document(
            self.collection, point_id(client_id, doc_type, doc_id), text, payload
        )

    async def add_faq(self, client_id: str, faq_id: str, question: str, answer: str) -> None:
        text = f"Q: {question}\nA: {answer}"
        await self.add_document(client_id, "faq", faq_id, text, {"question": question, "answer": answer})

    async def add_product(
        self,
        client_id: str,
        product_id: str,
        name: str,
        description: str,
        price: float,
    ) -> None:
        text = f"Product: {name}\nDescription: {description}\nPrice: {price:.2f}"
        await self.add_document(
            client_id, "product", product_id, text,
            {"name": name, "description": description, "price": price},
        )

    async def add_long_document(
        self,
        client_id: str,
        doc_type: str,
        doc_id: str,
        text: str,
        metadata: Optional[Dict[str, Any]] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        overlap: int = DEFAULT_OVERLAP,
    ) -> int:
        """Chunk text and index every chunk. Returns the chunk count."""
        base = dict(metadata or {})
        base.update({"client_id": client_id, "doc_type": doc_type, "doc_id": doc_id})
        documents = chunk_document(point_id(client_id, doc_type, doc_id), text, base, chunk_size, overlap)
        await self.service.add_documents(self.collection, documents)
        return len(documents)

    async def delete_document(self, client_id: str, doc_type: str, doc_id: str) -> None:
        await self.service.delete_document(self.collection, point_id(client_id, doc_type, doc_id))

    async def search(self, client_id: str, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        return await self._search(Filter.match(client_id=client_id), query, limit)

    async def search_by_type(
        self,
        client_id: str,
        doc_type: str,
        query: str,
        limit: Optional[int] = None,
    ) -> List[SearchResult]:
        return await self._search(Filter.match(client_id=client_id, doc_type=doc_type), query, limit)

    async def _search(self, flt: Filter, query: str, limit: Optional[int]) -> List[SearchResult]:
        points = await self.service.search(self.collection, query, limit or self.max_results, flt)
        return [
            SearchResult(
                score=p.score,
                text=str(p.payload.get("text", "")),
                doc_type=str(p.payload.get("doc_type", "")),
                doc_id=str(p.payload.get("doc_id", "")),
                metadata=p.payload,
            )
            for p in points
        ]

    async def get_relevant_context(self, client_id: str, query: str, max_results: Optional[int] = None) -> str:
        results = await self.search(client_id, query, max_results)
        return format_context(results)

    async def sync_from_database(self, client_id: str) -> Tuple[int, int]:
        """Copy the client's structured FAQs and products into the index.

        Ids come from row position, so re-running replaces instead of
        duplicating. Returns (indexed, failed).
        """
        snapshot = await self.structured.get_knowledge_base(client_id)
        indexed = failed = 0

        for i, faq in enumerate(snapshot.faqs):
            try:
                await self.add_faq(client_id, f"faq_{i}", faq.question, faq.answer)
                indexed += 1
            except VectorStoreError as e:
                failed += 1
                logger.warning(f"[VECTOR] Failed to index FAQ {i} for client {client_id}: {e}")

        for i, product in enumerate(snapshot.products):
            try:
                await self.add_product(client_id, f"product_{i}", product.name, "", product.price)
                indexed += 1
            except VectorStoreError as e:
                failed += 1
                logger.warning(f"[VECTOR] Failed to index product {i} for client {client_id}: {e}")

        logger.info(f"[VECTOR] Synced client {client_id}: {indexed} indexed, {failed} failed")
        return indexed, failed

    async def build_prompt(self, tenant: TenantContext, query: str) -> str:
        business_name, tone = await self.structured.get_business_profile(tenant.client_id)
        try:
            context = await self.get_relevant_context(tenant.client_id, query)
        except (VectorStoreError, KeyError, TypeError, ValueError) as e:
            raise RetrievalError(f"semantic search failed for client {tenant.client_id}: {e}") from e

        logger.info(f"[KB] Semantic context for client {tenant.client_id}: {len(context)} chars")
        return build_system_prompt(KnowledgeSnapshot(business_name, tone), relevant_context=context)

    async def close(self) -> None:
        await self.service.close()
