"""
Unit tests for the order service.

Tests both purchase flows, the order store, atomicity on failure, and the
best-effort admin notification.
"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from db_models import AdminNotification, Order, Product
from domain.enums import OrderStatus, OrderType
from domain.errors import (
    InsufficientCreditsError,
    InvalidInputError,
    NotFoundError,
    TransactionFailedError,
)
from services import ledger_service, notification_service, order_service


async def _count(db, model, *where) -> int:
    res = await db.execute(select(func.count(model.id)).where(*where))
    return res.scalar()


# ── Credit top-up ───────────────────────────────────────────────────


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, 1, 500, 999])
async def test_credit_purchase_below_minimum_rejected(db_session, buyer, buyer_actor, amount):
    with pytest.raises(InvalidInputError) as exc_info:
        await order_service.request_credit_purchase(
            db_session, actor=buyer_actor, amount=amount, proof_image="x"
        )
    assert exc_info.value.message == "Minimum credit amount is 1000 MMK"

    assert await _count(db_session, Order) == 0
    assert await _count(db_session, AdminNotification) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [None, "5000", 1500.0, True])
async def test_credit_purchase_non_integer_rejected(db_session, buyer, buyer_actor, amount):
    with pytest.raises(InvalidInputError):
        await order_service.request_credit_purchase(db_session, actor=buyer_actor, amount=amount)


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [1000, 25000])
async def test_credit_purchase_creates_pending_order(db_session, buyer, buyer_actor, amount):
    order = await order_service.request_credit_purchase(
        db_session, actor=buyer_actor, amount=amount, proof_image="uploads/proof-1.jpg"
    )

    assert order.id is not None
    assert order.type == OrderType.CREDIT.value
    assert order.status == OrderStatus.PENDING.value
    assert order.amount == amount
    assert order.proof_image == "uploads/proof-1.jpg"
    assert order.product_id is None
    assert order.created_at is not None

    # No credits are granted until an admin approves the request
    assert await ledger_service.get_balance(db_session, buyer_actor.id) == 5000


@pytest.mark.asyncio
async def test_credit_purchase_without_proof_image(db_session, buyer, buyer_actor):
    order = await order_service.request_credit_purchase(db_session, actor=buyer_actor, amount=2000)
    assert order.proof_image is None


@pytest.mark.asyncio
async def test_credit_purchase_notifies_admins(db_session, buyer, buyer_actor):
    await order_service.request_credit_purchase(
        db_session, actor=buyer_actor, amount=3000, proof_image="x"
    )

    messages = await notification_service.list_messages(db_session)
    assert [m.message for m in messages] == ["New credit purchase request: 3000 MMK from mya"]
    assert messages[0].audience == "admins"


# ── Product redemption ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_product_purchase_deducts_and_records(db_session, buyer, buyer_actor, sample_product):
    """Balance 5000, price 3000 -> balance 2000 and one PRODUCT order of 3000."""
    result = await order_service.request_product_purchase(
        db_session, actor=buyer_actor, product_id=sample_product.id
    )

    assert result["credits_deducted"] == 3000
    assert result["remaining_credits"] == 2000
    assert result["message"] == "Product order placed successfully. 3000 credits deducted."

    order = result["order"]
    assert order.type == OrderType.PRODUCT.value
    assert order.amount == 3000
    assert order.product_id == sample_product.id
    assert order.status == OrderStatus.PENDING.value
    assert order.proof_image is None

    assert await ledger_service.get_balance(db_session, buyer_actor.id) == 2000
    assert await _count(
        db_session,
        Order,
        Order.user_id == buyer_actor.id,
        Order.type == "PRODUCT",
        Order.product_id == sample_product.id,
    ) == 1


@pytest.mark.asyncio
async def test_product_purchase_notifies_admins(db_session, buyer, buyer_actor, sample_product):
    await order_service.request_product_purchase(
        db_session, actor=buyer_actor, product_id=sample_product.id
    )

    messages = await notification_service.list_messages(db_session)
    assert [m.message for m in messages] == ["New product order: MPT 5GB from mya"]


@pytest.mark.asyncio
async def test_product_purchase_insufficient_credits(db_session, buyer, buyer_actor):
    pricey = Product(operator="MPT", category="Bundle", name="MPT Max", price_mmk=9000, price_cr=5001)
    db_session.add(pricey)
    await db_session.commit()

    with pytest.raises(InsufficientCreditsError) as exc_info:
        await order_service.request_product_purchase(db_session, actor=buyer_actor, product_id=pricey.id)
    assert exc_info.value.message == "Insufficient credits"

    assert await ledger_service.get_balance(db_session, buyer_actor.id) == 5000
    assert await _count(db_session, Order) == 0
    assert await _count(db_session, AdminNotification) == 0


@pytest.mark.asyncio
async def test_product_purchase_unknown_product(db_session, buyer, buyer_actor):
    with pytest.raises(NotFoundError) as exc_info:
        await order_service.request_product_purchase(db_session, actor=buyer_actor, product_id=999)
    assert exc_info.value.message == "Product not found"
    assert await ledger_service.get_balance(db_session, buyer_actor.id) == 5000


@pytest.mark.asyncio
async def test_product_purchase_ignores_availability(db_session, buyer, buyer_actor):
    """Direct id lookup is not availability-filtered, so hidden products can be bought."""
    hidden = Product(
        operator="Atom", category="Topup", name="Atom 1000",
        price_mmk=1000, price_cr=1000, available=False,
    )
    db_session.add(hidden)
    await db_session.commit()

    result = await order_service.request_product_purchase(db_session, actor=buyer_actor, product_id=hidden.id)
    assert result["credits_deducted"] == 1000
    assert await ledger_service.get_balance(db_session, buyer_actor.id) == 4000


@pytest.mark.asyncio
async def test_product_purchase_failure_mid_transaction_rolls_back(
    db_session, buyer, buyer_actor, sample_product, monkeypatch
):
    """A store failure after the decrement leaves neither the deduction nor an order."""
    async def broken_insert(*args, **kwargs):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(order_service, "insert_order", broken_insert)

    with pytest.raises(TransactionFailedError):
        await order_service.request_product_purchase(
            db_session, actor=buyer_actor, product_id=sample_product.id
        )

    assert await ledger_service.get_balance(db_session, buyer_actor.id) == 5000
    assert await _count(db_session, Order) == 0
    assert await _count(db_session, AdminNotification) == 0


@pytest.mark.asyncio
async def test_notification_failure_keeps_committed_order(
    db_session, buyer, buyer_actor, sample_product, monkeypatch
):
    async def broken_append(*args, **kwargs):
        raise SQLAlchemyError("notifications table locked")

    monkeypatch.setattr(notification_service, "append", broken_append)

    result = await order_service.request_product_purchase(
        db_session, actor=buyer_actor, product_id=sample_product.id
    )

    assert result["order"].id is not None
    assert result["order"].amount == 3000
    assert await ledger_service.get_balance(db_session, buyer_actor.id) == 2000
    assert await _count(db_session, Order, Order.user_id == buyer_actor.id) == 1


@pytest.mark.asyncio
async def test_two_purchases_drain_balance(db_session, buyer, buyer_actor):
    product = Product(operator="MPT", category="Topup", name="MPT 2500", price_mmk=2500, price_cr=2500)
    db_session.add(product)
    await db_session.commit()

    await order_service.request_product_purchase(db_session, actor=buyer_actor, product_id=product.id)
    await order_service.request_product_purchase(db_session, actor=buyer_actor, product_id=product.id)

    with pytest.raises(InsufficientCreditsError):
        await order_service.request_product_purchase(db_session, actor=buyer_actor, product_id=product.id)

    assert await ledger_service.get_balance(db_session, buyer_actor.id) == 0
    assert await _count(db_session, Order, Order.user_id == buyer_actor.id) == 2


# ── Order store ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_list_by_user_newest_first(db_session, buyer, buyer_actor):
    base = datetime(2026, 1, 1, 12, 0, 0)
    for minutes, amount in [(0, 1000), (30, 2000), (10, 3000), (30, 4000)]:
        db_session.add(
            Order(
                user_id=buyer_actor.id,
                type="CREDIT",
                amount=amount,
                status="PENDING",
                created_at=base + timedelta(minutes=minutes),
            )
        )
        await db_session.flush()
    await db_session.commit()

    orders = await order_service.list_by_user(db_session, buyer_actor.id)

    assert [o.amount for o in orders] == [4000, 2000, 3000, 1000]
    stamps = [o.created_at for o in orders]
    assert all(a >= b for a, b in zip(stamps, stamps[1:]))


@pytest.mark.asyncio
async def test_list_by_user_only_own_orders(db_session, buyer, buyer_actor, admin_actor):
    await ledger_service.ensure_account(db_session, admin_actor)
    await db_session.commit()

    await order_service.request_credit_purchase(db_session, actor=buyer_actor, amount=1000)
    await order_service.request_credit_purchase(db_session, actor=admin_actor, amount=2000)

    mine = await order_service.list_by_user(db_session, buyer_actor.id)
    assert [o.amount for o in mine] == [1000]


@pytest.mark.asyncio
async def test_list_by_user_pagination(db_session, buyer, buyer_actor):
    for amount in (1000, 2000, 3000):
        await order_service.request_credit_purchase(db_session, actor=buyer_actor, amount=amount)

    page = await order_service.list_by_user(db_session, buyer_actor.id, limit=2, offset=1)
    assert [o.amount for o in page] == [2000, 1000]


@pytest.mark.asyncio
async def test_insert_order_shape_rules(db_session, buyer, buyer_actor):
    with pytest.raises(InvalidInputError):
        await order_service.insert_order(
            db_session, user_id=buyer_actor.id, order_type=OrderType.CREDIT, amount=None
        )
    with pytest.raises(InvalidInputError):
        await order_service.insert_order(
            db_session, user_id=buyer_actor.id, order_type=OrderType.CREDIT, amount=1000, product_id=3
        )
    with pytest.raises(InvalidInputError):
        await order_service.insert_order(
            db_session, user_id=buyer_actor.id, order_type=OrderType.PRODUCT, amount=1000
        )
    with pytest.raises(InvalidInputError):
        await order_service.insert_order(
            db_session, user_id=buyer_actor.id, order_type=OrderType.PRODUCT, amount=1000,
            product_id=3, proof_image="x",
        )


@pytest.mark.asyncio
async def test_insert_order_always_pending(db_session, buyer, buyer_actor):
    order = await order_service.insert_order(
        db_session, user_id=buyer_actor.id, order_type=OrderType.PRODUCT, amount=700, product_id=12
    )
    assert order.status == "PENDING"
    assert order.created_at is not None
