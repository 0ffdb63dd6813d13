# backend/cadplan/errors.py
"""
Typed failures that cross the request boundary.

Every AppError carries a machine-readable ``kind`` and an HTTP-style
``status_code`` so the transport layer can map it without inspecting
the message text.
"""

from typing import Any, List, Optional


class AppError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = 500
    kind = "internal_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        kind: Optional[str] = None,
        details: Optional[Any] = None
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if kind is not None:
            self.kind = kind
        self.details = details

    def to_dict(self) -> dict:
        payload = {
            "success": False,
            "message": self.message,
            "kind": self.kind,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidRequestError(AppError):
    status_code = 400
    kind = "invalid_request"


class PlanParseError(AppError):
    """AI response could not be decoded into a plan with floors and rooms."""
    status_code = 500
    kind = "invalid_ai_response"


class InvalidPlanError(AppError):
    """Plan data failed the structural pre-check."""
    status_code = 400
    kind = "invalid_plan"

    def __init__(self, errors: List[str], message: str = "Invalid plan data"):
        super().__init__(message, details=list(errors))
        self.errors = list(errors)


class FloorNotFoundError(AppError):
    status_code = 400
    kind = "floor_not_found"

    def __init__(self, floor_index: int):
        super().__init__(f"Floor index {floor_index} not found in plan data")
        self.floor_index = floor_index


class QuotaExceededError(AppError):
    status_code = 503
    kind = "quota_exceeded"


class RequestTooLargeError(AppError):
    status_code = 400
    kind = "request_too_large"


class TooManyRequestsError(AppError):
    status_code = 429
    kind = "rate_limited"


class GenerationFailedError(AppError):
    status_code = 500
    kind = "generation_failed"


# =============================================================================
# PROVIDER ERRORS (raised by completion provider adapters)
# =============================================================================

class ProviderError(Exception):
    """Failure reported by the completion provider."""

    QUOTA_EXCEEDED = "quota_exceeded"
    CONTEXT_TOO_LONG = "context_too_long"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    UPSTREAM_ERROR = "upstream_error"

    NON_RETRYABLE = {QUOTA_EXCEEDED, CONTEXT_TOO_LONG}

    def __init__(self, kind: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        return self.kind not in self.NON_RETRYABLE


# =============================================================================
# CONVERSION ERRORS (absorbed by the DWG conversion chain)
# =============================================================================

class ConversionError(Exception):
    """A single DWG conversion strategy failed."""


class ConversionTimeoutError(ConversionError):
    """Remote conversion job did not finish within the poll budget."""
