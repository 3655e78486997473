"""
Structured logging for the translation relay.
Embedding, retrieval, model fallback and suggestion workflow events share one format.
"""

import logging
from typing import Any, Dict, List

class StructuredLogger:
    """Structured logger for relay operations."""

    def __init__(self, name: str = "ramanya"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {sanitize_payload(details)}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status in ("skipped", "degraded", "exhausted"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_embedding_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log an embedding cache operation for a single correction record."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"embedding.{operation}", status, log_details)

    def log_retrieval(self, candidates_scanned: int, returned: int, top_k: int, min_score: float, top_score: float = None):
        """Log the outcome of one retrieval pass."""
        log_details = {
            "candidates_scanned": candidates_scanned,
            "returned": returned,
            "top_k": top_k,
            "min_score": min_score
        }
        if top_score is not None:
            log_details["top_score"] = round(top_score, 4)

        self.log_operation("retrieval.ranked", "success", log_details)

    def log_model_attempt(self, model_id: str, attempt: int, status: str, details: Dict[str, Any] = None):
        """Log one generation attempt in the model fallback chain."""
        log_details = {"model_id": model_id, "attempt": attempt}
        if details:
            log_details.update(details)

        self.log_operation("generation.attempt", status, log_details)

    def log_suggestion_event(self, action: str, record_id: str, status: str = "success", details: Dict[str, Any] = None):
        """Log a suggestion workflow event (submit, approve, reject)."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"suggestion.{action}", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)

# Global logger instance
logger = StructuredLogger()

# Payload sanitization utility
def sanitize_payload(payload: Any, max_length: int = 100, hidden_fields: List[str] = None) -> Any:
    """Truncate long strings and hide bulky fields for log output."""
    if hidden_fields is None:
        hidden_fields = ['embedding', 'vector', 'instruction']

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if k in hidden_fields:
                sanitized[k] = "[OMITTED]"
            else:
                sanitized[k] = sanitize_payload(v, max_length, hidden_fields)
        return sanitized
    elif isinstance(payload, str):
        return payload[:max_length] + "..." if len(payload) > max_length else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, max_length, hidden_fields) for item in payload]
    else:
        return payload
