"""Knowledge base models shared by the retrievers and the prompt builder."""
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class FAQ:
    question: str
    answer: str


@dataclass(frozen=True)
class Product:
    name: str
    price: float


@dataclass(frozen=True)
class RawEntry:
    """Free-form knowledge entry (service, policy, promo, contact, ...)."""
    type: str
    title: str
    content: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class KnowledgeSnapshot:
    """Business facts used to ground one generation call.

    Rebuilt for every event; never cached.
    """
    business_name: str
    tone: str
    faqs: Tuple[FAQ, ...] = ()
    products: Tuple[Product, ...] = ()
    raw_entries: Tuple[RawEntry, ...] = ()


@dataclass
class SearchResult:
    """Semantic search hit scoped to one tenant.

    Attributes:
        score: Similarity score in [0, 1].
        text: Full indexed text.
        doc_type: Document type ('faq', 'product', 'policy', ...).
        doc_id: Tenant-level document id.
        metadata: Complete point payload.
    """
    score: float
    text: str
    doc_type: str
    doc_id: str
    metadata: Dict[str, Any] = field(default_factory=dict)
