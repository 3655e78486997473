"""
Translation pipeline - embed, retrieve, assemble, invoke.
All collaborators are passed in; build_pipeline wires the configured ones.
"""

from typing import Iterable, List, Optional

from .config import RelayConfig
from .errors import InputValidationError
from .prompts import BASE_SYSTEM_INSTRUCTION, assemble
from .retriever import CorrectionRetriever
from .schema import ScoredCandidate, TranslationResult, VocabularyItem
from .store import ICorrectionStore, get_correction_store
from .suggestions import SuggestionWorkflow
from ..agents.generators import BaseGenerator, get_generator
from ..agents.translator import TranslationInvoker
from ..vector.embedding_cache import EmbeddingCache
from ..vector.embeddings import EmbeddingService, get_embedding_provider
from util.logging import logger


class TranslationPipeline:

    def __init__(self, config: RelayConfig, store: ICorrectionStore, embedder: EmbeddingService,
                 generator: BaseGenerator, base_instruction: str = BASE_SYSTEM_INSTRUCTION):
        self.config = config
        self.store = store
        self.embedder = embedder
        self.generator = generator
        self.base_instruction = base_instruction

        self.embedding_cache = EmbeddingCache(store, embedder)
        self.retriever = CorrectionRetriever(store, self.embedding_cache)
        self.invoker = TranslationInvoker(generator)
        self.suggestions = SuggestionWorkflow(store)

    def find_examples(self, message: str) -> List[ScoredCandidate]:
        if not self.config.rag_enabled:
            return []
        return self.retriever.retrieve_for_text(
            message,
            self.embedder,
            k=self.config.top_k,
            min_score=self.config.min_score
        )

    def build_instruction(self, message: str, vocabulary: Optional[Iterable] = None) -> tuple:
        examples = self.find_examples(message)
        vocabulary_items = [VocabularyItem.from_any(v) for v in (vocabulary or [])]
        return assemble(self.base_instruction, examples, vocabulary_items), examples

    def translate(self, message: str, vocabulary: Optional[Iterable] = None) -> TranslationResult:
        """
        Translate one message.

        Raises:
            InputValidationError: message is missing or blank
            AllModelsExhausted: no configured model produced output
        """
        if not message or not message.strip():
            raise InputValidationError("message is required")

        vocabulary = list(vocabulary or [])
        instruction, examples = self.build_instruction(message, vocabulary)
        result = self.invoker.invoke(instruction, message, self.config.model_ids)
        result.examples_used = [c.record.id for c in examples]

        logger.log_operation("translate", "degraded" if result.degraded else "success", {
            "model_used": result.model_used,
            "examples_used": len(examples),
            "vocabulary_items": len(vocabulary),
            "source_language": result.source_language
        })
        return result


def build_pipeline(config: RelayConfig = None) -> TranslationPipeline:
    """Wire the configured store, embedder and generator. Call once at startup."""
    config = config or RelayConfig.from_env()
    store = get_correction_store(config)
    embedder = EmbeddingService(get_embedding_provider(config))
    generator = get_generator(config)
    return TranslationPipeline(config, store, embedder, generator)
