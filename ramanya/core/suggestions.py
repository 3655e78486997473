"""
Suggestion workflow - pending corrections and their promotion to approved.
"""

from datetime import datetime
from typing import List, Optional

from .errors import InputValidationError, NotFoundError
from .schema import CorrectionRecord, STATUS_APPROVED, STATUS_PENDING
from .store import ICorrectionStore
from util.logging import logger


class SuggestionWorkflow:
    """
    Records user-submitted corrections and promotes them after review.

    Approval replaces the pending record with a new approved record through
    the store's single atomic promote, so a crash cannot leave both behind.
    """

    def __init__(self, store: ICorrectionStore):
        self.store = store

    def submit(self, original: str, suggestion: str, context: Optional[str] = None) -> str:
        """Create a pending correction and return its id."""
        if not original or not original.strip():
            raise InputValidationError("original is required")
        if not suggestion or not suggestion.strip():
            raise InputValidationError("suggestion is required")

        context = context.strip() if context and context.strip() else None
        record = CorrectionRecord(
            id="",
            original=original.strip(),
            suggestion=suggestion.strip(),
            context=context,
            status=STATUS_PENDING,
            created_at=datetime.now()
        )
        record_id = self.store.create(record)

        logger.log_suggestion_event("submitted", record_id, details={"original": record.original})
        return record_id

    def approve(self, record_id: str) -> CorrectionRecord:
        """Promote a pending correction; raises NotFoundError if none is pending under that id."""
        try:
            approved = self.store.promote(record_id, approved_at=datetime.now())
        except NotFoundError:
            logger.log_suggestion_event("approved", record_id, status="failed", details={"reason": "not_found"})
            raise

        logger.log_suggestion_event("approved", approved.id, details={"pending_id": record_id})
        return approved

    def reject(self, record_id: str) -> None:
        """Delete a pending correction."""
        record = self.store.get(record_id)
        if record is None or record.status != STATUS_PENDING:
            raise NotFoundError(f"No pending correction with id '{record_id}'")

        self.store.delete(record_id)
        logger.log_suggestion_event("rejected", record_id)

    def get(self, record_id: str) -> Optional[CorrectionRecord]:
        return self.store.get(record_id)

    def list_pending(self) -> List[CorrectionRecord]:
        return self.store.query_by_status(STATUS_PENDING)

    def list_approved(self) -> List[CorrectionRecord]:
        return self.store.query_by_status(STATUS_APPROVED)
