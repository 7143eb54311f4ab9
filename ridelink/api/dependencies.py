"""FastAPI dependency injection helpers."""

from typing import Optional

import redis.asyncio as aioredis
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.domain.entities import Principal
from ridelink.domain.exceptions import AuthenticationError
from ridelink.infrastructure.database import async_session_factory
from ridelink.infrastructure.redis_client import get_redis


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_redis_client() -> aioredis.Redis:
    return await get_redis()


def get_optional_principal(
    x_user_id: Optional[str] = Header(None),
    x_user_claims: Optional[str] = Header(None),
) -> Optional[Principal]:
    """Principal forwarded by the identity gateway, if any."""
    if not x_user_id or not x_user_id.strip():
        return None
    claims = frozenset(
        c.strip() for c in (x_user_claims or "").split(",") if c.strip()
    )
    return Principal(user_id=x_user_id.strip(), claims=claims)


def get_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise AuthenticationError("Authentication required")
    return principal
