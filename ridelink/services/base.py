"""Helpers shared by the workflow modules."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from ridelink.domain.entities import Principal
from ridelink.domain.exceptions import (
    AuthorizationError,
    ConcurrentModificationError,
    InvalidRequestError,
)


async def flush(session: AsyncSession) -> None:
    """Flush pending writes, turning a lost version race into a 409."""
    try:
        await session.flush()
    except StaleDataError as exc:
        raise ConcurrentModificationError(
            "The record was changed by another request; reload and retry"
        ) from exc


def require_user(
    principal: Principal,
    *user_ids: Optional[str],
    allow_admin: bool = True,
    message: str = "You are not allowed to act on this record",
) -> None:
    if allow_admin and principal.is_admin:
        return
    if not principal.is_any(*user_ids):
        raise AuthorizationError(message)


def require_admin(principal: Principal) -> None:
    if not principal.is_admin:
        raise AuthorizationError("Admin privileges required")


def required_text(value: Optional[str], field_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise InvalidRequestError(f"{field_name} is required")
    return cleaned
