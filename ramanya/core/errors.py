"""
Error taxonomy for the translation relay.
"""

from typing import List, Optional


class RelayError(Exception):
    """Base class for relay errors."""


class InputValidationError(RelayError):
    """Missing or malformed caller input. Rejected immediately, never retried."""


class UpstreamEmptyResult(RelayError):
    """The embedding or generation collaborator returned nothing usable."""

    def __init__(self, message: str, model_id: Optional[str] = None):
        super().__init__(message)
        self.model_id = model_id


class ParseFailure(RelayError):
    """Model output could not be read as the structured translation shape."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class AllModelsExhausted(RelayError):
    """Every configured model identifier failed for this request."""

    def __init__(self, attempted: List[str]):
        super().__init__("Translation service unavailable: all models failed")
        self.attempted = list(attempted)


class StoreError(RelayError):
    """The correction store failed a read or write."""


class NotFoundError(RelayError):
    """No record matches the requested identifier."""
