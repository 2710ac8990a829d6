from .embedder import Embedder, GeminiEmbedder, OpenAIEmbedder, new_embedder
from .service import Document, VectorService
from .store import VectorProviderType, VectorStore, VectorStoreError, new_vector_store
from .types import CollectionInfo, Condition, Filter, Point, Range, ScoredPoint

__all__ = [
    'CollectionInfo',
    'Condition',
    'Document',
    'Embedder',
    'Filter',
    'GeminiEmbedder',
    'OpenAIEmbedder',
    'Point',
    'Range',
    'ScoredPoint',
    'VectorProviderType',
    'VectorService',
    'VectorStore',
    'VectorStoreError',
    'new_embedder',
    'new_vector_store',
]
