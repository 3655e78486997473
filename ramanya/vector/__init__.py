"""
Vector layer - similarity math, embedding providers and the lazy embedding cache.
"""

# Package initialization for vector module
from .similarity import dot, magnitude, cosine_similarity
from .embeddings import (
    IEmbeddingProvider,
    DeterministicHashEmbedding,
    SentenceTransformerEmbedding,
    OllamaEmbedding,
    EmbeddingService,
    get_embedding_provider
)
from .embedding_cache import EmbeddingCache

__all__ = [
    'dot',
    'magnitude',
    'cosine_similarity',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'OllamaEmbedding',
    'EmbeddingService',
    'get_embedding_provider',
    'EmbeddingCache'
]
