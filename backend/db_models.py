"""
SQLAlchemy ORM models for the Top-up Storefront API.

Tables:
    users               — authenticated actors and their credit balance
    products            — top-up catalog grouped by operator/category
    orders              — CREDIT requests and PRODUCT redemptions (append-only)
    admin_notifications — shared message log read by administrators
"""
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Text, ForeignKey,
    CheckConstraint, Index,
)

from database import Base
from domain.enums import OrderStatus


class User(Base):
    """
    Credit ledger entry for an authenticated actor.

    username is a snapshot taken when the row is created, kept for admin
    lookups; roles are never stored here, they come from the token per request.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=False)  # assigned by the auth collaborator
    username = Column(String(100), nullable=False)
    credits = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_users_credits_non_negative"),
    )


class Product(Base):
    """Catalog entry. available=False hides it from listings only."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    operator = Column(String(100), nullable=False, index=True)
    category = Column(String(100), nullable=False)
    name = Column(String(200), nullable=False)
    price_mmk = Column(Integer, nullable=False)
    price_cr = Column(Integer, nullable=False)
    available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("price_mmk >= 0", name="ck_products_price_mmk_non_negative"),
        CheckConstraint("price_cr >= 0", name="ck_products_price_cr_non_negative"),
        # For the storefront listing: filter by available, order by operator
        Index("ix_products_available_operator", "available", "operator"),
    )


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # CREDIT | PRODUCT
    amount = Column(Integer, nullable=False)  # MMK for CREDIT, credits for PRODUCT
    proof_image = Column(Text, nullable=True)  # CREDIT only, opaque storage reference
    product_id = Column(Integer, nullable=True)  # PRODUCT only; survives product deletion
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    __table_args__ = (
        CheckConstraint(
            "(type = 'CREDIT' AND product_id IS NULL) OR "
            "(type = 'PRODUCT' AND product_id IS NOT NULL AND proof_image IS NULL)",
            name="ck_orders_type_shape",
        ),
        # For order history: filter by user_id, order by created_at DESC
        Index("ix_orders_user_created", "user_id", "created_at"),
    )


class AdminNotification(Base):
    """One row per message; every admin reads the same log."""
    __tablename__ = "admin_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    audience = Column(String(50), nullable=False, default="admins", index=True)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
