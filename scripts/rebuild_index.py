#!/usr/bin/env python3
"""
Embedding Reindex Utility
Computes missing (or, with --force, all) correction embeddings ahead of traffic.
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from ramanya.core.config import RelayConfig
from ramanya.core.schema import VALID_STATUSES, STATUS_APPROVED
from ramanya.core.store import get_correction_store
from ramanya.vector.embedding_cache import EmbeddingCache
from ramanya.vector.embeddings import EmbeddingService, get_embedding_provider


def main(argv=None):
    """Rebuild correction embeddings from the canonical store."""
    parser = argparse.ArgumentParser(description="Compute correction embeddings")
    parser.add_argument("--status", choices=VALID_STATUSES, default=STATUS_APPROVED,
                        help="Which corrections to sweep (default: approved)")
    parser.add_argument("--force", action="store_true",
                        help="Recompute embeddings that already exist")
    args = parser.parse_args(argv)

    config = RelayConfig.from_env()
    if config.store_backend == "memory":
        print("ERROR: STORE_BACKEND=memory has nothing persistent to reindex")
        return 1

    store = get_correction_store(config)
    cache = EmbeddingCache(store, EmbeddingService(get_embedding_provider(config)))

    print(f"Starting embedding sweep over '{args.status}' corrections (provider: {config.embed_provider})...")
    stats = cache.reindex(status=args.status, force=args.force)

    print(f"✓ Scanned {stats['scanned']} corrections")
    print(f"  embedded: {stats['embedded']}, already present: {stats['skipped']}, failed: {stats['failed']}")
    return 0 if stats["failed"] == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
