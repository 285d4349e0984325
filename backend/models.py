"""
Pydantic models for request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiBase(BaseModel):
    """Shared base — allows construction by Python name or alias, and from ORM rows."""
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


# ── Identity ────────────────────────────────────────────────────────

class Actor(ApiBase):
    """Authenticated identity supplied by the auth collaborator."""
    id: int
    username: str
    is_admin: bool = Field(False, alias="isAdmin")


# ── Catalog ─────────────────────────────────────────────────────────

class ProductFields(ApiBase):
    """
    Full field set for create and replace.

    Every field except `available` is required; a missing or non-integer price
    is rejected instead of being coerced to zero.
    """
    operator: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=200)
    price_mmk: int = Field(..., alias="priceMMK", ge=0, strict=True)
    price_cr: int = Field(..., alias="priceCr", ge=0, strict=True)
    available: Optional[bool] = None


class ProductOut(ApiBase):
    id: int
    operator: str
    category: str
    name: str
    price_mmk: int = Field(..., alias="priceMMK")
    price_cr: int = Field(..., alias="priceCr")
    available: bool


# ── Orders ──────────────────────────────────────────────────────────

class CreditPurchaseRequest(ApiBase):
    """Top-up request; the proof image is an opaque upload reference."""
    amount: int = Field(..., strict=True, description="Requested MMK amount")
    proof_image: Optional[str] = Field(default=None, alias="proofImage", max_length=2000)


class ProductPurchaseRequest(ApiBase):
    product_id: int = Field(..., alias="productId", gt=0, strict=True)


class OrderOut(ApiBase):
    id: int
    user_id: int = Field(..., alias="userId")
    type: str
    amount: int
    proof_image: Optional[str] = Field(default=None, alias="proofImage")
    product_id: Optional[int] = Field(default=None, alias="productId")
    status: str
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


def product_payload(product) -> dict:
    """Serialize a Product row with camelCase wire names."""
    return ProductOut.model_validate(product).model_dump(mode="json", by_alias=True)


def order_payload(order) -> dict:
    """Serialize an Order row with camelCase wire names."""
    return OrderOut.model_validate(order).model_dump(mode="json", by_alias=True)
