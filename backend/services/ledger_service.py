"""
Account ledger — per-user credit balance.

The balance is only ever lowered through try_decrement(), a single guarded
UPDATE, so the sufficiency check and the write cannot be split by a
concurrent request for the same user. Credits are granted by the admin
review process, not here.
"""
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from db_models import User
from domain.errors import InsufficientCreditsError, InvalidInputError, NotFoundError
from models import Actor

logger = logging.getLogger(__name__)


async def ensure_account(db: AsyncSession, actor: Actor) -> User:
    """
    Return the ledger row for an authenticated actor, creating it on first use.

    New accounts start with zero credits. When two first requests race, the
    loser of the primary-key insert rolls back and returns the winner's row.
    """
    user = await db.get(User, actor.id)
    if user is not None:
        return user

    user = User(id=actor.id, username=actor.username, credits=0)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        user = await db.get(User, actor.id)
        if user is None:
            raise
        logger.info(f"Ledger account for user {actor.id} was opened by a concurrent request")
        return user

    logger.info(f"Ledger account opened for user {actor.id} ({actor.username})")
    return user


async def get_balance(db: AsyncSession, user_id: int) -> int:
    res = await db.execute(select(User.credits).where(User.id == user_id))
    credits = res.scalar_one_or_none()
    if credits is None:
        raise NotFoundError("Account", user_id)
    return credits


async def try_decrement(db: AsyncSession, user_id: int, amount: int) -> None:
    """
    Atomically subtract `amount` if the balance covers it.

    Runs inside the caller's transaction; the caller commits or rolls back.
    Raises InsufficientCreditsError when no row matched the guard.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidInputError("Decrement amount must be a non-negative integer", field="amount")

    res = await db.execute(
        update(User)
        .where(User.id == user_id, User.credits >= amount)
        .values(credits=User.credits - amount)
        .execution_options(synchronize_session=False)
    )
    if res.rowcount != 1:
        logger.info(f"Guarded decrement of {amount} rejected for user {user_id}")
        raise InsufficientCreditsError()
