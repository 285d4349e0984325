"""
Order service — credit top-up requests and product redemptions.

Two flows:
    request_credit_purchase   CREDIT order, PENDING, no balance change;
                              an admin approves it (and grants credits) later.
    request_product_purchase  guarded credit decrement + PRODUCT order in one
                              transaction, committed together or not at all.

Both flows notify admins after their transaction commits. Notification
failures are logged and never undo the order.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db_models import Order
from domain.constants import (
    CREDIT_REQUEST_NOTICE,
    PRODUCT_ORDER_NOTICE,
    PRODUCT_ORDER_PLACED,
)
from domain.enums import OrderStatus, OrderType
from domain.errors import InsufficientCreditsError, InvalidInputError, TransactionFailedError
from models import Actor
from services import catalog_service, ledger_service, notification_service

logger = logging.getLogger(__name__)


# ── Order store ─────────────────────────────────────────────────────

async def list_by_user(
    db: AsyncSession,
    user_id: int,
    *,
    limit: int = 50,
    offset: int = 0,
) -> list[Order]:
    """Newest first; same-timestamp rows fall back to the later insert first."""
    res = await db.execute(
        select(Order)
        .where(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(res.scalars().all())


async def insert_order(
    db: AsyncSession,
    *,
    user_id: int,
    order_type: OrderType,
    amount: int | None,
    proof_image: str | None = None,
    product_id: int | None = None,
) -> Order:
    """
    Add a PENDING order to the session (flushed, not committed).

    CREDIT orders need an amount and may carry a proof image; PRODUCT orders
    need a product id and the resolved credit price, and never a proof image.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInputError("amount is required", field="amount")

    if order_type == OrderType.CREDIT:
        if product_id is not None:
            raise InvalidInputError("Credit orders cannot reference a product", field="productId")
    elif order_type == OrderType.PRODUCT:
        if product_id is None:
            raise InvalidInputError("productId is required", field="productId")
        if proof_image is not None:
            raise InvalidInputError("Product orders cannot carry a proof image", field="proofImage")
    else:
        raise InvalidInputError(f"Unknown order type: {order_type}", field="type")

    order = Order(
        user_id=user_id,
        type=OrderType(order_type).value,
        amount=amount,
        proof_image=proof_image,
        product_id=product_id,
        status=OrderStatus.PENDING.value,
    )
    db.add(order)
    await db.flush()
    return order


# ── Purchase flows ──────────────────────────────────────────────────

async def request_credit_purchase(
    db: AsyncSession,
    *,
    actor: Actor,
    amount: int | None,
    proof_image: str | None = None,
) -> Order:
    minimum = settings.min_credit_purchase_mmk
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < minimum:
        raise InvalidInputError(f"Minimum credit amount is {minimum} MMK", field="amount")

    try:
        order = await insert_order(
            db,
            user_id=actor.id,
            order_type=OrderType.CREDIT,
            amount=amount,
            proof_image=proof_image,
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Credit order insert failed for user {actor.id}: {e}")
        raise TransactionFailedError("Failed to create credit order")

    logger.info(f"Credit order {order.id}: {amount} MMK requested by user {actor.id}")
    # Detached so a failed notification rollback cannot expire the loaded row.
    db.expunge(order)

    await notification_service.notify_admins(
        db, CREDIT_REQUEST_NOTICE.format(amount=amount, username=actor.username)
    )
    return order


async def request_product_purchase(
    db: AsyncSession,
    *,
    actor: Actor,
    product_id: int,
) -> dict:
    """
    Redeem credits for a catalog product.

    Returns:
        dict: {
            order: Order,
            credits_deducted: int,
            remaining_credits: int,
            message: str,
        }
    """
    product = await catalog_service.get_by_id(db, product_id)
    price = product.price_cr
    product_name = product.name

    balance = await ledger_service.get_balance(db, actor.id)
    if balance < price:
        await db.rollback()
        raise InsufficientCreditsError(details={"balance": balance, "required": price})

    try:
        await ledger_service.try_decrement(db, actor.id, price)
        order = await insert_order(
            db,
            user_id=actor.id,
            order_type=OrderType.PRODUCT,
            amount=price,
            product_id=product_id,
        )
        await db.commit()
    except InsufficientCreditsError:
        # Another request for the same user spent the balance after our read.
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Product order transaction failed for user {actor.id}, product {product_id}: {e}")
        raise TransactionFailedError()

    remaining = balance - price
    try:
        remaining = await ledger_service.get_balance(db, actor.id)
    except SQLAlchemyError as e:
        logger.warning(f"Could not re-read balance for user {actor.id} after order {order.id}: {e}")

    logger.info(f"Product order {order.id}: user {actor.id} spent {price} credits on product {product_id}")
    db.expunge(order)

    await notification_service.notify_admins(
        db, PRODUCT_ORDER_NOTICE.format(product_name=product_name, username=actor.username)
    )

    return {
        "order": order,
        "credits_deducted": price,
        "remaining_credits": remaining,
        "message": PRODUCT_ORDER_PLACED.format(credits=price),
    }
