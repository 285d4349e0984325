"""
Catalog endpoints — storefront listing for everyone, CRUD for admins.
"""
import logging

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from deps import require_actor, require_admin
from domain.constants import PRODUCT_DELETED
from domain.responses import success_response
from models import Actor, ProductFields, product_payload
from services import catalog_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


def _fields(request: ProductFields) -> dict:
    return request.model_dump(exclude_none=True)


@router.get("")
async def list_products(
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    """Available products grouped as operator -> category -> products."""
    products = await catalog_service.list_available(db)
    grouped = catalog_service.group_by_operator_category(products)
    return success_response(
        data={
            "products": {
                operator: {
                    category: [product_payload(p) for p in bucket]
                    for category, bucket in categories.items()
                }
                for operator, categories in grouped.items()
            }
        },
        meta={"total": len(products)},
    )


@router.get("/{product_id}")
async def get_product(
    product_id: int = Path(..., gt=0),
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
):
    product = await catalog_service.get_by_id(db, product_id)
    return success_response(data={"product": product_payload(product)})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductFields,
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    product = await catalog_service.create_product(db, **_fields(request))
    await db.commit()
    await db.refresh(product)
    return success_response(data={"product": product_payload(product)})


@router.put("/{product_id}")
async def update_product(
    request: ProductFields,
    product_id: int = Path(..., gt=0),
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    product = await catalog_service.update_product(db, product_id, **_fields(request))
    await db.commit()
    await db.refresh(product)
    return success_response(data={"product": product_payload(product)})


@router.delete("/{product_id}")
async def delete_product(
    product_id: int = Path(..., gt=0),
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await catalog_service.delete_product(db, product_id)
    await db.commit()
    return success_response(data={"id": product_id, "message": PRODUCT_DELETED})
