"""
Translation invoker - runs the generator over an ordered model list with fallback.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from .generators import BaseGenerator
from ..core.errors import AllModelsExhausted, ParseFailure, UpstreamEmptyResult
from ..core.llm_json import degraded_result, parse_translation
from ..core.schema import TranslationResult
from util.logging import logger


@dataclass
class InvocationOutcome:
    """Result of the fallback scan: success(text, model_id) or exhausted."""
    succeeded: bool
    text: str = ""
    model_id: Optional[str] = None
    attempted: List[str] = field(default_factory=list)

    @classmethod
    def success(cls, text: str, model_id: str, attempted: List[str]) -> "InvocationOutcome":
        return cls(succeeded=True, text=text, model_id=model_id, attempted=attempted)

    @classmethod
    def exhausted(cls, attempted: List[str]) -> "InvocationOutcome":
        return cls(succeeded=False, attempted=attempted)


class TranslationInvoker:
    """
    Tries each model id in order and stops at the first non-empty answer.

    Raised exceptions and empty text both count as failure and advance to the
    next model. Output that is not a structured translation is still returned,
    as a degraded result carrying the raw text.
    """

    def __init__(self, generator: BaseGenerator):
        self.generator = generator

    def run_models(self, final_instruction: str, user_message: str, model_ids: Sequence[str]) -> InvocationOutcome:
        attempted = []
        for attempt, model_id in enumerate(model_ids, start=1):
            attempted.append(model_id)
            start_time = datetime.now()
            try:
                text = self.generator.generate(model_id, final_instruction, user_message)
                if not text or not text.strip():
                    raise UpstreamEmptyResult("model returned an empty response", model_id=model_id)
            except UpstreamEmptyResult as e:
                logger.log_model_attempt(model_id, attempt, "skipped", {"reason": str(e)})
                continue
            except Exception as e:
                logger.log_model_attempt(model_id, attempt, "failed", {"error": str(e)})
                continue

            processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
            logger.log_model_attempt(model_id, attempt, "success", {
                "processing_time_ms": processing_time,
                "response_length": len(text)
            })
            return InvocationOutcome.success(text, model_id, attempted)

        return InvocationOutcome.exhausted(attempted)

    def invoke(self, final_instruction: str, user_message: str, model_ids: Sequence[str]) -> TranslationResult:
        """
        Generate and parse a translation.

        Raises:
            AllModelsExhausted: every model raised or returned empty text
        """
        outcome = self.run_models(final_instruction, user_message, model_ids)
        if not outcome.succeeded:
            logger.log_operation("generation.fallback", "exhausted", {"attempted": outcome.attempted})
            raise AllModelsExhausted(outcome.attempted)

        try:
            result = parse_translation(outcome.text)
        except ParseFailure as e:
            logger.log_operation("generation.parse", "degraded", {"model_id": outcome.model_id, "error": str(e)})
            result = degraded_result(outcome.text)

        result.model_used = outcome.model_id
        return result
