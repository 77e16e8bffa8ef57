"""
PRISMA Studio Error Models and Exception Classes
Standard error envelopes shared by every route.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes."""
    AUTH_FAIL = "auth_fail"
    VALIDATION_ERROR = "validation_error"
    THIRD_PARTY_FAIL = "third_party_fail"
    RATE_LIMIT = "rate_limit"
    STRUCTURAL_FAILURE = "structural_failure"
    INTERNAL_ERROR = "internal_error"


class ErrorResponse(BaseModel):
    """Standard error envelope."""
    ok: bool = Field(default=False, description="Always false for errors")
    code: ErrorCode = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Additional error context")


class SuccessResponse(BaseModel):
    """Standard success envelope."""
    ok: bool = Field(default=True, description="Always true for success")
    data: Any = Field(..., description="Response payload")


# Custom Exception Classes

class StudioException(Exception):
    """Base exception for all PRISMA Studio errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert exception to error response model."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthenticationError(StudioException):
    """Credential missing or rejected by the provider (401)."""

    def __init__(self, message: str = "API Key not valid. Please check your configuration.", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.AUTH_FAIL,
            message=message,
            details=details,
            status_code=401
        )


class ValidationError(StudioException):
    """Input validation failed (422)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details=details,
            status_code=422
        )


class ThirdPartyError(StudioException):
    """External service failed (503)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ErrorCode.THIRD_PARTY_FAIL,
            message=message,
            details=details,
            status_code=503
        )


class RateLimitError(StudioException):
    """Provider quota exhausted (429)."""

    def __init__(
        self,
        message: str = "QUOTA EXHAUSTED: Your API key has reached its limit. Wait 60s or switch to a paid key.",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            code=ErrorCode.RATE_LIMIT,
            message=message,
            details=details,
            status_code=429
        )


STRUCTURAL_FAILURE_GUIDANCE = "Please shorten the script or reduce the scene density or duration."


class JsonStructuralError(StudioException):
    """Model output could not be parsed even after repair (422)."""

    def __init__(
        self,
        message: str = "JSON_STRUCTURAL_FAILURE: Response was truncated or invalid.",
        details: Optional[Dict[str, Any]] = None
    ):
        merged = {"guidance": STRUCTURAL_FAILURE_GUIDANCE}
        merged.update(details or {})
        super().__init__(
            code=ErrorCode.STRUCTURAL_FAILURE,
            message=f"{message} {STRUCTURAL_FAILURE_GUIDANCE}",
            details=merged,
            status_code=422
        )
