"""
Unified exception hierarchy for the study tracker.

All domain exceptions inherit from StudyTrackerError and carry:
- error_code: machine-readable string (e.g. "QUIZ_NOT_FOUND")
- status_code: HTTP status code
- message: human-readable description
- context: optional structured metadata dict
"""

from typing import Optional, Dict, Any


class StudyTrackerError(Exception):
    """Base exception for all study tracker domain errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}
        super().__init__(message)


class ValidationError(StudyTrackerError):
    """Bad input, or model output that breaks the expected schema."""

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_REQUEST",
        status_code: int = 400,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=status_code, context=context)


class AuthenticationError(StudyTrackerError):
    """401 no logged-in user on the request."""

    def __init__(
        self,
        message: str = "Please login to continue",
        error_code: str = "NOT_AUTHENTICATED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=401, context=context)


class AuthorizationError(StudyTrackerError):
    """403 requester is not the owner of the resource."""

    def __init__(
        self,
        message: str = "Not authorized",
        error_code: str = "NOT_AUTHORIZED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=403, context=context)


class NotFoundError(StudyTrackerError):
    """404 resource-not-found errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "NOT_FOUND",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=404, context=context)


class DuplicateError(StudyTrackerError):
    """409 a quiz already exists for this upload."""

    def __init__(
        self,
        message: str,
        error_code: str = "QUIZ_ALREADY_EXISTS",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=409, context=context)


class UnsupportedTypeError(StudyTrackerError):
    """415 upload kind or MIME type cannot be turned into a quiz."""

    def __init__(
        self,
        message: str,
        error_code: str = "UNSUPPORTED_FILE_TYPE",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=415, context=context)


class ExtractionError(StudyTrackerError):
    """422 source file unreadable or empty."""

    def __init__(
        self,
        message: str,
        error_code: str = "EXTRACTION_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=422, context=context)


class GenerationError(StudyTrackerError):
    """502 generative provider or transport failure."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERATION_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=502, context=context)


class MalformedResponseError(GenerationError):
    """Model output could not be parsed as JSON."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="MALFORMED_RESPONSE", context=context)


class StorageError(StudyTrackerError):
    """500-level database / storage failures."""

    def __init__(
        self,
        message: str,
        error_code: str = "STORAGE_ERROR",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)
