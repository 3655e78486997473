"""
Request and response models for the relay HTTP API.
"""

from pydantic import BaseModel, field_validator
from typing import Any, Dict, Optional, List
from datetime import datetime

class VocabularyItemModel(BaseModel):
    original: str
    suggestion: str
    context: Optional[str] = None

    @field_validator('original', 'suggestion')
    @classmethod
    def term_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('vocabulary terms cannot be empty')
        return v

class TranslateRequest(BaseModel):
    message: str
    vocabulary: List[VocabularyItemModel] = []

    @field_validator('message')
    @classmethod
    def message_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('message cannot be empty')
        return v

class TranslateResponse(BaseModel):
    source_language: str
    translation: str
    romanization: Optional[str] = None
    notes: Optional[str] = None

class SuggestionRequest(BaseModel):
    original: str
    suggestion: str
    context: Optional[str] = None

    @field_validator('original')
    @classmethod
    def original_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('original cannot be empty')
        return v

    @field_validator('suggestion')
    @classmethod
    def suggestion_must_not_be_empty(cls, v):
        if not v.strip():
            raise ValueError('suggestion cannot be empty')
        return v

class SuggestionCreatedResponse(BaseModel):
    id: str
    status: str

class CorrectionResponse(BaseModel):
    id: str
    original: str
    suggestion: str
    context: Optional[str] = None
    status: str
    created_at: datetime
    approved_at: Optional[datetime] = None
    has_embedding: bool = False

class CorrectionListResponse(BaseModel):
    items: List[CorrectionResponse]

class ReindexResponse(BaseModel):
    scanned: int
    embedded: int
    skipped: int
    failed: int

class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    approved_count: int
    pending_count: int
    rag_enabled: bool
    models: List[str]
    generator: Dict[str, Any] = {}
