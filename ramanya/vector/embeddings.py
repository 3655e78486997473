"""
Embedding providers and the embed(text) -> vector | None service used by retrieval.
"""

from abc import ABC, abstractmethod
import hashlib
import struct
from typing import List, Optional

import ollama
from sentence_transformers import SentenceTransformer

from util.logging import logger


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for testing purposes.

    Identical text always maps to the identical vector, so an exact repeat of a
    stored correction scores 1.0. Unrelated texts land near 0. No model download
    is needed, which keeps tests and offline development self-contained.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector using a counter-mode hash."""
        normalized = " ".join(text.lower().split())
        vector = []
        counter = 0
        while len(vector) < self.dimension:
            digest = hashlib.sha256(f"{counter}:{normalized}".encode("utf-8")).digest()
            # 8 unsigned 32-bit ints per digest, mapped to [-1, 1]
            for value in struct.unpack(">8I", digest):
                vector.append((value / (2**32)) * 2 - 1)
            counter += 1
        return vector[:self.dimension]

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension

class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models.

    Defaults to a multilingual model since queries arrive in English and Mon.
    """

    def __init__(self, model_name: str = "paraphrase-multilingual-mpnet-base-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector using sentence transformers."""
        embedding = self.model.encode(text, convert_to_tensor=False)
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            # Get dimension by encoding a dummy string
            dummy_embedding = self.model.encode("test", convert_to_tensor=False)
            self._dimension = len(dummy_embedding)
        return self._dimension

class OllamaEmbedding(IEmbeddingProvider):
    """Embeddings served by a local Ollama instance."""

    def __init__(self, model_name: str = "nomic-embed-text", host: str = None):
        self.model_name = model_name
        self._client = ollama.Client(host=host) if host else ollama.Client()
        self._dimension = None

    def embed_text(self, text: str) -> list[float]:
        response = self._client.embed(model=self.model_name, input=text)
        embeddings = response["embeddings"]
        return list(embeddings[0]) if embeddings else []

    def get_dimension(self) -> int:
        if self._dimension is None:
            self._dimension = len(self.embed_text("test"))
        return self._dimension


class EmbeddingService:
    """
    The embed collaborator: text in, vector or None out.

    Returns None for blank text, for provider errors and for empty vectors, so
    callers treat every kind of upstream emptiness the same way.
    """

    def __init__(self, provider: IEmbeddingProvider):
        self.provider = provider

    def embed(self, text: Optional[str]) -> Optional[List[float]]:
        if not text or not text.strip():
            return None

        try:
            vector = self.provider.embed_text(text)
        except Exception as e:
            logger.log_operation("embedding.compute", "failed", {
                "provider": type(self.provider).__name__,
                "error": str(e)
            })
            return None

        if vector is None or len(vector) == 0:
            return None
        return [float(x) for x in vector]


def get_embedding_provider(config) -> IEmbeddingProvider:
    """Get configured embedding provider implementation."""
    if config.embed_provider == "sentence_transformers":
        return SentenceTransformerEmbedding(config.embed_model_name)
    elif config.embed_provider == "ollama":
        return OllamaEmbedding(config.embed_model_name, host=config.ollama_host)
    return DeterministicHashEmbedding(config.embed_dimension)
