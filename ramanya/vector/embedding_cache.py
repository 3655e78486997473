"""
Lazy embedding cache over the correction store.

Records are embedded the first time a retrieval pass needs them and the vector
is written back with a single field update. There is no locking: two requests
racing on the same record both compute the vector and the later write wins,
which is harmless because the input text is the same.
"""

from typing import Dict, Iterable, List, Optional

from ..core.schema import CorrectionRecord, STATUS_APPROVED
from ..core.store import ICorrectionStore
from .embeddings import EmbeddingService
from util.logging import logger


class EmbeddingCache:

    def __init__(self, store: ICorrectionStore, embedder: EmbeddingService):
        self.store = store
        self.embedder = embedder

    def ensure_embedding(self, record: CorrectionRecord, force: bool = False) -> Optional[CorrectionRecord]:
        """Return the record with an embedding attached, or None if it was skipped."""
        if record.embedding and not force:
            return record

        try:
            vector = self.embedder.embed(record.original)
            if vector is None:
                logger.log_embedding_operation("compute", record.id, {"reason": "empty_embedding"}, status="skipped")
                return None

            self.store.update_field(record.id, "embedding", vector)
        except Exception as e:
            logger.log_embedding_operation("persist", record.id, {"error": str(e)}, status="failed")
            return None

        record.embedding = vector
        logger.log_embedding_operation("compute", record.id, {"dimension": len(vector)})
        return record

    def ensure_embeddings(self, records: Iterable[CorrectionRecord]) -> List[CorrectionRecord]:
        """Embed what is missing; records that cannot be embedded are left out."""
        ready = []
        for record in records:
            embedded = self.ensure_embedding(record)
            if embedded is not None:
                ready.append(embedded)
        return ready

    def reindex(self, status: str = STATUS_APPROVED, force: bool = False) -> Dict[str, int]:
        """Sweep the store and compute missing (or, with force, all) embeddings."""
        records = self.store.query_by_status(status)
        stats = {"scanned": len(records), "embedded": 0, "skipped": 0, "failed": 0}

        for record in records:
            if record.embedding and not force:
                stats["skipped"] += 1
                continue
            if self.ensure_embedding(record, force=force) is None:
                stats["failed"] += 1
            else:
                stats["embedded"] += 1

        logger.log_operation("embedding.reindex", "success", dict(stats, status=status, force=force))
        return stats
