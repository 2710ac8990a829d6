"""
Structured knowledge retriever.

Loads a tenant's knowledge base straight from the relational tables with
bounded queries: at most MAX_FAQS FAQ rows, MAX_PRODUCTS product rows and
MAX_RAW_ENTRIES free-form entries, plus one row for business name and tone.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Tuple

import mysql.connector

from ..database_client import Database
from ..errors import RetrievalError
from ..llm.prompt_builder import build_system_prompt
from ..models.knowledge import FAQ, KnowledgeSnapshot, Product, RawEntry
from ..models.tenant import TenantContext

logger = logging.getLogger(__name__)

MAX_FAQS = 50
MAX_PRODUCTS = 100
MAX_RAW_ENTRIES = 50

_PROFILE_QUERY = "SELECT business_name, tone FROM clients WHERE id = %s"

_FAQ_QUERY = f"""
    SELECT question, answer
    FROM knowledge_base
    WHERE client_id = %s AND type = 'faq'
    ORDER BY created_at, id
    LIMIT {MAX_FAQS}
"""

_PRODUCT_QUERY = f"""
    SELECT product_name, product_price
    FROM knowledge_base
    WHERE client_id = %s AND type = 'product'
    ORDER BY created_at, id
    LIMIT {MAX_PRODUCTS}
"""

_RAW_ENTRY_QUERY = f"""
    SELECT type, title, content
    FROM knowledge_base
    WHERE client_id = %s AND type NOT IN ('faq', 'product')
    ORDER BY created_at, id
    LIMIT {MAX_RAW_ENTRIES}
"""


def _parse_content(value: Any) -> Dict[str, Any]:
    """JSON columns come back as str or bytes depending on the driver."""
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return {"text": str(value)}
    return parsed if isinstance(parsed, dict) else {"value": parsed}


class StructuredRetriever:
    """Relational knowledge base lookup for one tenant at a time."""

    def __init__(self, db: Database):
        self.db = db

    async def get_knowledge_base(self, client_id: str) -> KnowledgeSnapshot:
        """Load the knowledge snapshot for a client.

        Raises:
            RetrievalError: client not found or any query failed.
        """
        return await asyncio.to_thread(self._load_snapshot, client_id)

    async def get_business_profile(self, client_id: str) -> Tuple[str, str]:
        """Return (business_name, tone) for a client."""
        return await asyncio.to_thread(self._load_profile, client_id)

    async def build_prompt(self, tenant: TenantContext, query: str) -> str:
        snapshot = await self.get_knowledge_base(tenant.client_id)
        logger.info(
            f"[KB] Loaded {len(snapshot.faqs)} FAQs, {len(snapshot.products)} products, "
            f"{len(snapshot.raw_entries)} entries for client {tenant.client_id}"
        )
        return build_system_prompt(snapshot)

    async def close(self) -> None:
        pass

    def _load_profile(self, client_id: str) -> Tuple[str, str]:
        try:
            row = self.db.fetch_one(_PROFILE_QUERY, (client_id,))
        except mysql.connector.Error as e:
            raise RetrievalError(f"profile lookup failed for client {client_id}: {e}") from e
        if not row:
            raise RetrievalError(f"tenant not found: {client_id}")
        try:
            return row["business_name"] or "", row["tone"] or "neutral"
        except KeyError as e:
            raise RetrievalError(f"malformed profile row for client {client_id}: {e}") from e

    def _load_snapshot(self, client_id: str) -> KnowledgeSnapshot:
        business_name, tone = self._load_profile(client_id)
        try:
            faq_rows = self.db.fetch_all(_FAQ_QUERY, (client_id,))
            product_rows = self.db.fetch_all(_PRODUCT_QUERY, (client_id,))
            raw_rows = self.db.fetch_all(_RAW_ENTRY_QUERY, (client_id,))
        except mysql.connector.Error as e:
            raise RetrievalError(f"knowledge base query failed for client {client_id}: {e}") from e

        try:
            return KnowledgeSnapshot(
                business_name=business_name,
                tone=tone,
                faqs=tuple(self._faqs(faq_rows)[:MAX_FAQS]),
                products=tuple(self._products(product_rows)[:MAX_PRODUCTS]),
                raw_entries=tuple(
                    RawEntry(type=r["type"], title=r["title"] or "", content=_parse_content(r["content"]))
                    for r in raw_rows[:MAX_RAW_ENTRIES]
                ),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RetrievalError(f"malformed knowledge row for client {client_id}: {e}") from e

    @staticmethod
    def _faqs(rows: List[Dict[str, Any]]) -> List[FAQ]:
        # Rows with missing columns are skipped, not fatal.
        return [
            FAQ(question=r["question"], answer=r["answer"])
            for r in rows
            if r.get("question") and r.get("answer")
        ]

    @staticmethod
    def _products(rows: List[Dict[str, Any]]) -> List[Product]:
        products = []
        for r in rows:
            if not r.get("product_name") or r.get("product_price") is None:
                continue
            products.append(Product(name=r["product_name"], price=float(r["product_price"])))
        return products
