"""
Admin notification sink.

A single append to a shared log keyed by audience; every admin reads the same
rows. Delivery (push, email, dashboard polling) is outside this API.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from db_models import AdminNotification

logger = logging.getLogger(__name__)


async def append(db: AsyncSession, message: str, audience: str | None = None) -> AdminNotification:
    """Append one message and commit it."""
    note = AdminNotification(audience=audience or settings.admin_audience, message=message)
    db.add(note)
    await db.commit()
    return note


async def notify_admins(db: AsyncSession, message: str) -> bool:
    """
    Best-effort append for the order flows.

    Called after the order transaction has committed, so a failure here is
    logged and swallowed: the order stands either way.
    """
    try:
        await append(db, message)
        return True
    except SQLAlchemyError as e:
        await db.rollback()
        logger.warning(f"Admin notification not recorded ({message!r}): {e}")
        return False


async def list_messages(db: AsyncSession, audience: str | None = None, limit: int = 50) -> list[AdminNotification]:
    res = await db.execute(
        select(AdminNotification)
        .where(AdminNotification.audience == (audience or settings.admin_audience))
        .order_by(AdminNotification.created_at.desc(), AdminNotification.id.desc())
        .limit(limit)
    )
    return list(res.scalars().all())
