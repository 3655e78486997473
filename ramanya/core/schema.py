"""
Data model for corrections, vocabulary and translation results.
"""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
VALID_STATUSES = (STATUS_PENDING, STATUS_APPROVED)


@dataclass
class CorrectionRecord:
    id: str
    original: str
    suggestion: str
    status: str  # pending, approved
    created_at: datetime
    context: Optional[str] = None
    embedding: Optional[List[float]] = None
    approved_at: Optional[datetime] = None

    @property
    def is_well_formed(self) -> bool:
        return bool(self.original and self.original.strip() and self.suggestion and self.suggestion.strip())

    def to_dict(self, include_embedding: bool = True) -> Dict[str, Any]:
        """Convert to dictionary for storage or rendering."""
        data = asdict(self)
        # Convert datetime objects to ISO format strings
        data['created_at'] = self.created_at.isoformat()
        data['approved_at'] = self.approved_at.isoformat() if self.approved_at else None
        if not include_embedding:
            data.pop('embedding')
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'CorrectionRecord':
        """Create from dictionary (for loading from storage)."""
        data = dict(data)
        if isinstance(data.get('created_at'), str):
            data['created_at'] = datetime.fromisoformat(data['created_at'])
        if isinstance(data.get('approved_at'), str):
            data['approved_at'] = datetime.fromisoformat(data['approved_at'])
        return cls(**data)


@dataclass
class ScoredCandidate:
    """A correction record paired with its similarity to the query."""
    record: CorrectionRecord
    score: float


@dataclass
class VocabularyItem:
    """Caller-declared override, used only for the current prompt."""
    original: str
    suggestion: str
    context: Optional[str] = None

    @classmethod
    def from_any(cls, item: Any) -> 'VocabularyItem':
        if isinstance(item, cls):
            return item
        if isinstance(item, Mapping):
            return cls(
                original=item.get('original', ''),
                suggestion=item.get('suggestion', ''),
                context=item.get('context')
            )
        return cls(
            original=getattr(item, 'original', ''),
            suggestion=getattr(item, 'suggestion', ''),
            context=getattr(item, 'context', None)
        )


@dataclass
class TranslationResult:
    source_language: str
    translation: str
    romanization: Optional[str] = None
    notes: Optional[str] = None
    model_used: str = ""
    degraded: bool = False
    examples_used: List[str] = field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        """Public response shape; optional fields are omitted when empty."""
        response = {
            "source_language": self.source_language,
            "translation": self.translation,
        }
        if self.romanization:
            response["romanization"] = self.romanization
        if self.notes:
            response["notes"] = self.notes
        return response
