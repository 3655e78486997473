"""
Correction retrieval - ranks approved corrections against a query embedding.
"""

from typing import List, Optional, Sequence

from .errors import StoreError
from .schema import ScoredCandidate, STATUS_APPROVED
from .store import ICorrectionStore
from ..vector.embedding_cache import EmbeddingCache
from ..vector.embeddings import EmbeddingService
from ..vector.similarity import cosine_similarity
from util.logging import logger

DEFAULT_TOP_K = 5
DEFAULT_MIN_SCORE = 0.3


class CorrectionRetriever:
    """
    Scores every approved correction against the query and keeps the best few.

    The approved collection is scanned in full on every call; there is no
    incremental index, so newly approved records are visible immediately.
    """

    def __init__(self, store: ICorrectionStore, embedding_cache: EmbeddingCache):
        self.store = store
        self.embedding_cache = embedding_cache

    def retrieve(self, query_vector: Optional[Sequence[float]], k: int = DEFAULT_TOP_K,
                 min_score: float = DEFAULT_MIN_SCORE) -> List[ScoredCandidate]:
        """
        Return at most k approved corrections scoring strictly above min_score.

        The list is truncated to k before the score floor is applied, so a
        low scorer inside the window costs a slot and fewer than k results may
        come back.

        Args:
            query_vector: Embedding of the request text, or None when it could not be embedded
            k: Maximum number of examples
            min_score: Exclusive similarity floor

        Returns:
            Candidates ordered by descending score; ties keep store order
        """
        if query_vector is None or len(query_vector) == 0 or k <= 0:
            return []

        try:
            records = self.store.query_by_status(STATUS_APPROVED)
        except (StoreError, ValueError, TypeError) as e:
            logger.log_operation("retrieval.load", "failed", {"error": str(e)})
            return []

        # Malformed entries are never surfaced
        records = [r for r in records if r.is_well_formed]
        records = self.embedding_cache.ensure_embeddings(records)

        scored = [ScoredCandidate(record=r, score=cosine_similarity(query_vector, r.embedding)) for r in records]
        # sorted() is stable, so equal scores keep store order
        ranked = sorted(scored, key=lambda c: c.score, reverse=True)

        window = ranked[:k]
        results = [c for c in window if c.score > min_score]

        logger.log_retrieval(
            candidates_scanned=len(scored),
            returned=len(results),
            top_k=k,
            min_score=min_score,
            top_score=ranked[0].score if ranked else None
        )
        return results

    def retrieve_for_text(self, text: str, embedder: EmbeddingService, k: int = DEFAULT_TOP_K,
                          min_score: float = DEFAULT_MIN_SCORE) -> List[ScoredCandidate]:
        """Embed text and retrieve; an unavailable embedding short-circuits to []."""
        query_vector = embedder.embed(text)
        if query_vector is None:
            logger.log_operation("retrieval.query_embedding", "skipped", {"reason": "empty_embedding"})
            return []
        return self.retrieve(query_vector, k=k, min_score=min_score)
