# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class PrintOrderException(Exception):
    """
    Base exception for the print order API.

    All custom HTTP exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PRINT_ORDER_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Upload Exceptions
# =============================================================================

class SigningFailedError(PrintOrderException):
    """Raised when a signed upload or download URL cannot be issued."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to sign URL: {error}",
            code="SIGNING_FAILED",
            status_code=500,
            suggestion="Try again later; check storage credentials if the issue persists",
            details={"error": error},
        )


class MissingKeyError(PrintOrderException):
    """Raised when an admin download is requested without an object key."""

    def __init__(self):
        super().__init__(
            message="missing key",
            code="MISSING_KEY",
            status_code=400,
            suggestion="Pass the object key as ?key=prod/...",
        )


# =============================================================================
# Checkout Exceptions
# =============================================================================

class NoItemsError(PrintOrderException):
    """Raised when a checkout is requested with an empty cart."""

    def __init__(self):
        super().__init__(
            message="no_items",
            code="NO_ITEMS",
            status_code=400,
            suggestion="Send at least one item with objectKey, wmm, hmm and price",
        )


class CheckoutFailedError(PrintOrderException):
    """Raised when Stripe rejects the checkout session."""

    def __init__(self, error: str):
        super().__init__(
            message=f"stripe_failed: {error}",
            code="STRIPE_FAILED",
            status_code=500,
            suggestion="Check STRIPE_SECRET_KEY and the item prices",
            details={"error": error},
        )


# =============================================================================
# Admin Exceptions
# =============================================================================

class ListingFailedError(PrintOrderException):
    """Raised when listing output files fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"list_failed: {error}",
            code="LIST_FAILED",
            status_code=500,
            suggestion="Check storage availability and STORAGE_BUCKET",
            details={"error": error},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def print_order_exception_handler(
    request: Request,
    exc: PrintOrderException
) -> JSONResponse:
    """
    Convert PrintOrderException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle Pydantic validation errors.

    Converts validation errors to user-friendly messages.
    """
    return JSONResponse(
        status_code=422,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "errors": str(exc)
        }
    )
