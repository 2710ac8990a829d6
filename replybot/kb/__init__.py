from .chunker import chunk_document, chunk_text
from .retriever import StructuredRetriever
from .vector_retriever import VectorRetriever

__all__ = ['StructuredRetriever', 'VectorRetriever', 'chunk_document', 'chunk_text']
