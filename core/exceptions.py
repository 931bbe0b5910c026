# core/exceptions.py
"""
Exception hierarchy shared by the services and the HTTP layer.

Every error carries a machine-readable ``code``, a human message and the HTTP
status the API answers with.  ``to_dict()`` produces the JSON envelope the
FastAPI exception handlers return::

    {"error": {"code": "...", "message": "...", "status": 503}}
"""

from typing import Any, Dict, List, Optional


class KnowledgeBrowserException(Exception):
    """Base class for every error raised on purpose by this project."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "status": self.status_code,
        }
        if self.details:
            error["details"] = self.details
        return {"error": error}


class LLMUnavailableError(KnowledgeBrowserException):
    """The inference endpoint is unreachable or the model is missing."""

    code = "LLM_UNAVAILABLE"
    status_code = 503


class CompletionError(KnowledgeBrowserException):
    """A single completion attempt failed (bad status, bad payload)."""

    code = "COMPLETION_FAILED"
    status_code = 502


class PageProcessingError(KnowledgeBrowserException):
    code = "PROCESSING_FAILED"
    status_code = 502


class StorageError(KnowledgeBrowserException):
    """Wraps any ``sqlite3.Error`` raised by the store."""

    code = "STORAGE_ERROR"
    status_code = 500


class NotFoundError(KnowledgeBrowserException):
    code = "NOT_FOUND"
    status_code = 404


class ValidationError(KnowledgeBrowserException):
    """Request payload failed validation (wraps FastAPI's error list)."""

    code = "VALIDATION_ERROR"
    status_code = 422

    def __init__(self, errors: List[Any], message: str = "Request validation failed"):
        super().__init__(message, details={"errors": errors})
