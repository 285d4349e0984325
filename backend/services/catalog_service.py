"""
Catalog service — top-up products grouped by operator and category.

Reads are open to any authenticated actor; writes are admin-only (enforced by
the router). Listing hides unavailable products, id lookup does not.
"""
import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import Product
from domain.errors import InvalidInputError, NotFoundError

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("operator", "category", "name")
_PRICE_FIELDS = ("price_mmk", "price_cr")


def _validate_fields(fields: dict) -> dict:
    """
    Check a full product field set.

    Prices must be present non-negative ints, not bools; text fields must be
    non-empty strings.
    """
    clean = {}
    for name in _TEXT_FIELDS:
        value = fields.get(name)
        if not isinstance(value, str) or not value.strip():
            raise InvalidInputError(f"{name} is required", field=name)
        clean[name] = value.strip()
    for name in _PRICE_FIELDS:
        value = fields.get(name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidInputError(f"{name} must be an integer", field=name)
        if value < 0:
            raise InvalidInputError(f"{name} must be non-negative", field=name)
        clean[name] = value
    available = fields.get("available")
    if available is not None:
        if not isinstance(available, bool):
            raise InvalidInputError("available must be a boolean", field="available")
        clean["available"] = available
    return clean


async def list_available(db: AsyncSession) -> list[Product]:
    res = await db.execute(
        select(Product)
        .where(Product.available == True)  # noqa: E712
        .order_by(Product.operator.asc(), Product.id.asc())
    )
    return list(res.scalars().all())


async def get_by_id(db: AsyncSession, product_id: int) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


async def create_product(db: AsyncSession, **fields) -> Product:
    clean = _validate_fields(fields)
    clean.setdefault("available", True)
    product = Product(**clean)
    db.add(product)
    await db.flush()
    logger.info(f"Product created: {product.id} {product.operator}/{product.category}/{product.name}")
    return product


async def update_product(db: AsyncSession, product_id: int, **fields) -> Product:
    """Replace every catalog field; `available` is kept when not supplied."""
    clean = _validate_fields(fields)
    product = await get_by_id(db, product_id)

    for name, value in clean.items():
        setattr(product, name, value)
    product.updated_at = datetime.utcnow()

    await db.flush()
    logger.info(f"Product updated: {product.id}")
    return product


async def delete_product(db: AsyncSession, product_id: int) -> None:
    """Hard delete. Orders that reference the id keep it as a dangling reference."""
    product = await get_by_id(db, product_id)
    await db.delete(product)
    await db.flush()
    logger.info(f"Product deleted: {product_id}")


def group_by_operator_category(products: list[Product]) -> dict[str, dict[str, list[Product]]]:
    """
    Bucket a flat product listing as operator -> category -> products.

    Dict insertion order follows first appearance, and each bucket keeps the
    listing order it was given.
    """
    grouped: dict[str, dict[str, list[Product]]] = {}
    for product in products:
        grouped.setdefault(product.operator, {}).setdefault(product.category, []).append(product)
    return grouped
