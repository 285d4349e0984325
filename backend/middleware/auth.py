"""
Bearer-token authentication helpers.

Tokens are issued by the account service (login lives outside this API) and
verified here:
  - Authorization: Bearer <jwt>, HS256, signed with settings.jwt_secret
  - claims: sub (user id), username, is_admin, iat, exp, iss
"""
import logging
from datetime import datetime, timezone
from typing import Optional

import jwt
from fastapi import Depends, Header, HTTPException

from config import settings
from domain.errors import ForbiddenError, UnauthenticatedError
from models import Actor

logger = logging.getLogger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _parse_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


def _signing_secret() -> str:
    if not settings.jwt_secret:
        logger.error("JWT_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Token verification is not configured")
    return settings.jwt_secret


def decode_access_token(token: str) -> dict:
    secret = _signing_secret()
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            issuer=settings.jwt_issuer,
            options={"require": ["exp", "iat", "iss", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Access token expired.")
    except jwt.InvalidTokenError:
        raise UnauthenticatedError("Invalid access token.")


def issue_access_token(*, user_id: int, username: str, is_admin: bool = False) -> str:
    """Mint a token in the format require_actor accepts (used by tests and tooling)."""
    issued = int(_now_utc().timestamp())
    claims = {
        "iss": settings.jwt_issuer,
        "sub": str(user_id),
        "username": username,
        "is_admin": is_admin,
        "iat": issued,
        "exp": issued + settings.jwt_access_ttl_minutes * 60,
    }
    return jwt.encode(claims, _signing_secret(), algorithm="HS256")


def actor_from_claims(payload: dict) -> Actor:
    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise UnauthenticatedError("Invalid access token subject.")
    username = payload.get("username")
    if not username:
        raise UnauthenticatedError("Access token is missing the username claim.")
    return Actor(id=user_id, username=username, is_admin=bool(payload.get("is_admin", False)))


async def require_actor(
    authorization: Optional[str] = Header(None, alias="Authorization"),
) -> Actor:
    """Resolve the calling actor from the bearer token or fail with 401."""
    token = _parse_bearer_token(authorization)
    if not token:
        raise UnauthenticatedError(
            "Authentication required. Provide Authorization: Bearer <token>."
        )
    return actor_from_claims(decode_access_token(token))


async def require_admin(actor: Actor = Depends(require_actor)) -> Actor:
    if not actor.is_admin:
        logger.warning(f"Admin route denied for user {actor.id} ({actor.username})")
        raise ForbiddenError("Admin access required")
    return actor
