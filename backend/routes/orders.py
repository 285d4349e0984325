"""
Order endpoints — order history, credit top-up requests, product redemption.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from deps import Pagination, pagination_params, require_account
from domain.constants import CREDIT_REQUEST_SUBMITTED
from domain.responses import paginated_response, success_response
from middleware.rate_limit import rate_limit
from models import Actor, CreditPurchaseRequest, ProductPurchaseRequest, order_payload
from services import order_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])

_order_rate = rate_limit(
    max_requests=settings.order_rate_limit_requests,
    window_seconds=settings.order_rate_limit_window_seconds,
)


@router.get("")
async def list_my_orders(
    page: Pagination = Depends(pagination_params),
    actor: Actor = Depends(require_account),
    db: AsyncSession = Depends(get_db),
):
    """The caller's orders, most recent first."""
    orders = await order_service.list_by_user(
        db, actor.id, limit=page["limit"], offset=page["offset"]
    )
    return paginated_response(
        items=[order_payload(o) for o in orders],
        limit=page["limit"],
        offset=page["offset"],
    )


@router.post("/credit", status_code=status.HTTP_201_CREATED)
async def request_credit_purchase(
    request: CreditPurchaseRequest,
    actor: Actor = Depends(require_account),
    db: AsyncSession = Depends(get_db),
    _rate=Depends(_order_rate),
):
    order = await order_service.request_credit_purchase(
        db,
        actor=actor,
        amount=request.amount,
        proof_image=request.proof_image,
    )
    return success_response(
        data={
            "order": order_payload(order),
            "message": CREDIT_REQUEST_SUBMITTED,
        }
    )


@router.post("/product", status_code=status.HTTP_201_CREATED)
async def request_product_purchase(
    request: ProductPurchaseRequest,
    actor: Actor = Depends(require_account),
    db: AsyncSession = Depends(get_db),
    _rate=Depends(_order_rate),
):
    result = await order_service.request_product_purchase(
        db,
        actor=actor,
        product_id=request.product_id,
    )
    return success_response(
        data={
            "order": order_payload(result["order"]),
            "creditsDeducted": result["credits_deducted"],
            "remainingCredits": result["remaining_credits"],
            "message": result["message"],
        }
    )
