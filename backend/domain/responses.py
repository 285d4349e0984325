"""
Response envelope helpers.

- Success: { "success": true, "data": <payload>, "meta": {...} }
- Error: { "success": false, "error": { "code": "...", "message": "...", "details": {...} } }
"""
from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Standard error detail structure."""
    code: str = Field(..., description="Stable error kind (e.g., 'not_found', 'insufficient_credits')")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional error context")


class StandardErrorResponse(BaseModel):
    """Standard error response envelope."""
    success: bool = Field(False, description="Always false for errors")
    error: ErrorDetail = Field(..., description="Error details")


def success_response(data: Any, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: The response payload
        meta: Optional metadata (pagination, counts, etc.)
    """
    response = {"success": True, "data": data}
    if meta:
        response["meta"] = meta
    return response


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build the error envelope used by the exception handlers in main.py."""
    return StandardErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details or None)
    ).model_dump()


def paginated_response(items: list[Any], limit: int, offset: int = 0) -> dict[str, Any]:
    """
    Create a standardized paginated response.

    hasMore is true whenever the page came back full (no count query is run).
    """
    meta = {
        "limit": limit,
        "offset": offset,
        "count": len(items),
        "hasMore": len(items) == limit,
    }
    return success_response(data=items, meta=meta)
