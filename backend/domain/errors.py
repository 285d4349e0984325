"""
Custom domain exceptions for consistent error handling.

These exceptions are mapped to HTTP status codes by the global exception handler
in main.py. Each subclass carries a stable `code` that clients can switch on.
"""
from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base class for all domain-specific errors."""
    code = "domain_error"

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST, details: dict | None = None):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.details = details or {}


class InvalidInputError(DomainError):
    """Malformed or out-of-range request field (400)."""
    code = "invalid_input"

    def __init__(self, message: str, field: str | None = None, details: dict | None = None):
        details = dict(details or {})
        if field:
            details["field"] = field
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class NotFoundError(DomainError):
    """Resource not found (404)."""
    code = "not_found"

    def __init__(self, resource_type: str, identifier: str | int | None = None, details: dict | None = None):
        details = dict(details or {})
        if identifier is not None:
            details["id"] = identifier
        super().__init__(f"{resource_type} not found", status_code=status.HTTP_404_NOT_FOUND, details=details)


class ForbiddenError(DomainError):
    """Permission denied (403)."""
    code = "forbidden"

    def __init__(self, message: str = "Admin access required", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_403_FORBIDDEN, details=details)


class UnauthenticatedError(DomainError):
    """Missing or invalid actor identity (401)."""
    code = "unauthenticated"

    def __init__(self, message: str = "Authentication required", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_401_UNAUTHORIZED, details=details)


class InsufficientCreditsError(DomainError):
    """Balance is lower than the product's credit price (400)."""
    code = "insufficient_credits"

    def __init__(self, message: str = "Insufficient credits", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class TransactionFailedError(DomainError):
    """The atomic deduct-and-insert unit could not commit (500)."""
    code = "transaction_failed"

    def __init__(self, message: str = "Order transaction failed", details: dict | None = None):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, details=details)
