"""Provider-neutral types shared by the vector store implementations."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Point:
    """A vector with its id and payload."""
    id: str
    vector: List[float]
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Range:
    gte: Optional[float] = None
    gt: Optional[float] = None
    lte: Optional[float] = None
    lt: Optional[float] = None

    def to_dict(self) -> Dict[str, float]:
        return {k: v for k, v in (("gte", self.gte), ("gt", self.gt),
                                  ("lte", self.lte), ("lt", self.lt)) if v is not None}


@dataclass
class Condition:
    """Exact match on a payload key, or a numeric range when range is set."""
    key: str
    match: Any = None
    range: Optional[Range] = None


@dataclass
class Filter:
    must: List[Condition] = field(default_factory=list)
    should: List[Condition] = field(default_factory=list)
    must_not: List[Condition] = field(default_factory=list)

    @classmethod
    def match(cls, **values: Any) -> "Filter":
        """Filter.match(client_id="c1", doc_type="faq") -> all keys must match."""
        return cls(must=[Condition(key=k, match=v) for k, v in values.items()])

    def is_empty(self) -> bool:
        return not (self.must or self.should or self.must_not)


@dataclass
class ScoredPoint:
    id: str
    score: float
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CollectionInfo:
    name: str
    vector_size: int
    points_count: int
    status: str
