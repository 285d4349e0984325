"""
Shared FastAPI dependencies.

Centralizes common dependencies so routers import from a single place
(DB session, auth guards, ledger account, pagination).
"""

from __future__ import annotations

from typing import TypedDict

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from middleware.auth import require_actor, require_admin  # noqa: F401  (re-exported)
from models import Actor
from services import ledger_service


class Pagination(TypedDict):
    limit: int
    offset: int


def pagination_params(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0, le=100_000),
) -> Pagination:
    return {"limit": limit, "offset": offset}


async def require_account(
    actor: Actor = Depends(require_actor),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """
    Require an authenticated actor with a ledger row.

    Create-on-demand so a first-time user can place orders right after login;
    the new row is committed before the route runs its own transaction.
    """
    await ledger_service.ensure_account(db, actor)
    await db.commit()
    return actor
