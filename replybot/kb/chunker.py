"""
Chunker for long knowledge base documents.

Splits text into fixed-size character windows that overlap, so a fact that
straddles a boundary still appears whole in at least one chunk. Each chunk
becomes its own vector document tagged with its parent id.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from ..vector.service import Document

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_OVERLAP = 200


def chunk_text(text: str, chunk_size: int = DEFAULT_CHUNK_SIZE, overlap: int = DEFAULT_OVERLAP) -> List[str]:
    """Split text into overlapping windows.

    Args:
        text: Text to split.
        chunk_size: Window length in characters.
        overlap: Characters shared by consecutive windows.

    Returns:
        List of chunks. Text no longer than chunk_size comes back whole.

    Raises:
        ValueError: chunk_size is not positive or overlap is not smaller than chunk_size.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0 or overlap >= chunk_size:
        raise ValueError("overlap must be >= 0 and smaller than chunk_size")

    if len(text) <= chunk_size:
        return [text]

    chunks = []
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        chunks.append(text[start:end])
        if end == len(text):
            break
        start = end - overlap

    return chunks


def chunk_document(
    doc_id: Optional[str],
    text: str,
    metadata: Optional[Dict[str, Any]] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> List[Document]:
    """Split one document into chunk Documents with ids "<doc_id>_chunk_<i>"."""
    base_id = doc_id or str(uuid.uuid4())
    chunks = chunk_text(text, chunk_size, overlap)

    documents = []
    for i, chunk in enumerate(chunks):
        chunk_metadata = dict(metadata or {})
        chunk_metadata.update({
            "chunk_index": i,
            "total_chunks": len(chunks),
            "parent_doc_id": base_id,
        })
        documents.append(Document(id=f"{base_id}_chunk_{i}", text=chunk, metadata=chunk_metadata))

    logger.debug(f"[CHUNKER] Split document {base_id} into {len(documents)} chunks")
    return documents
