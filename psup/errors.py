"""
Structured Error Response Module for psup.

Provides the error taxonomy shared by the fetcher, the extractor, the
store and the chat proxy, plus consistent response formatting.
"""

from typing import Optional, Dict, Any
from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timezone


def _timestamp() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Client errors (4xx)
    PROBLEM_NOT_FOUND = "PROBLEM_NOT_FOUND"
    PARSE_FAILURE = "PARSE_FAILURE"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Server errors (5xx)
    FETCH_ERROR = "FETCH_ERROR"
    READ_ERROR = "READ_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"
    CHAT_API_ERROR = "CHAT_API_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


@dataclass
class ErrorResponse:
    """Structured error response for API endpoints."""

    error: bool
    code: str
    message: str
    detail: Optional[str] = None
    timestamp: str = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = _timestamp()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result = {
            "error": self.error,
            "code": self.code,
            "message": self.message,
            "timestamp": self.timestamp
        }
        if self.detail:
            result["detail"] = self.detail
        return result


class APIError(Exception):
    """Base exception for API errors with structured response."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        status_code: int = 400,
        detail: Optional[str] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to ErrorResponse."""
        return ErrorResponse(
            error=True,
            code=self.code.value,
            message=self.message,
            detail=self.detail
        )


# Specific error classes for common scenarios
class ProblemNotFoundError(APIError):
    """Raised when the judge answers a problem page with a non-success status."""

    def __init__(self, problem_id: str, status_code: Optional[int] = None):
        super().__init__(
            code=ErrorCode.PROBLEM_NOT_FOUND,
            message=f"Problem not found: {problem_id}",
            status_code=404,
            detail=f"Upstream status {status_code}" if status_code else None
        )
        self.problem_id = problem_id


class FetchError(APIError):
    """Raised when the problem page cannot be reached (DNS, connect, timeout)."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            code=ErrorCode.FETCH_ERROR,
            message="Failed to fetch problem",
            status_code=502,
            detail=detail
        )


class ReadError(APIError):
    """Raised when the problem page body cannot be read as text."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            code=ErrorCode.READ_ERROR,
            message="Failed to read response",
            status_code=502,
            detail=detail
        )


class ParseFailure(APIError):
    """Raised when a required field is missing from the parsed page."""

    def __init__(self, field: str = "title"):
        super().__init__(
            code=ErrorCode.PARSE_FAILURE,
            message=f"Failed to parse problem {field}",
            status_code=422
        )
        self.field = field


class StorageError(APIError):
    """Raised for any failure of the local storage engine."""

    def __init__(self, message: str):
        super().__init__(
            code=ErrorCode.STORAGE_ERROR,
            message=message,
            status_code=500
        )


class ChatAPIError(APIError):
    """Raised when the hosted chat model call fails."""

    def __init__(self, message: str = "Chat API error", detail: Optional[str] = None):
        super().__init__(
            code=ErrorCode.CHAT_API_ERROR,
            message=message,
            status_code=502,
            detail=detail
        )


class ValidationError(APIError):
    """Raised for request validation failures."""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=400,
            detail=detail
        )


def internal_error_response(message: str, detail: Optional[str] = None) -> Dict[str, Any]:
    """Create the response body for an unexpected exception."""
    return ErrorResponse(
        error=True,
        code=ErrorCode.INTERNAL_ERROR.value,
        message=message,
        detail=detail
    ).to_dict()
