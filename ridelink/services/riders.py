"""Rider accounts and the per-driver saved-rider book."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.domain.entities import Principal
from ridelink.domain.exceptions import (
    RiderAlreadyRegisteredError,
    RiderNotFoundError,
    SavedRiderNotFoundError,
)
from ridelink.infrastructure.models import RiderModel, SavedRiderModel
from ridelink.infrastructure.repositories import RiderRepository, SavedRiderRepository
from .base import flush, require_user, required_text
from .drivers import get_driver

logger = logging.getLogger(__name__)


async def register_rider(
    session: AsyncSession,
    principal: Principal,
    *,
    name: str,
    phone: str,
    email: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> RiderModel:
    repo = RiderRepository(session)
    if await repo.get_by_id(principal.user_id) is not None:
        raise RiderAlreadyRegisteredError("Rider profile already exists")
    rider = await repo.create(
        RiderModel(
            id=principal.user_id,
            name=required_text(name, "Name"),
            phone=required_text(phone, "Phone"),
            email=email,
            photo_url=photo_url,
        )
    )
    logger.info("Rider %s registered", rider.id)
    return rider


async def get_rider(session: AsyncSession, rider_id: str) -> RiderModel:
    rider = await RiderRepository(session).get_by_id(rider_id)
    if rider is None:
        raise RiderNotFoundError(f"Rider {rider_id} not found")
    return rider


# ── Saved riders ──────────────────────────────────────────────────────


async def add_saved_rider(
    session: AsyncSession,
    principal: Principal,
    driver_id: str,
    *,
    name: str,
    phone: Optional[str] = None,
    email: Optional[str] = None,
    notes: Optional[str] = None,
) -> SavedRiderModel:
    require_user(principal, driver_id, allow_admin=False)
    await get_driver(session, driver_id)
    return await SavedRiderRepository(session).create(
        SavedRiderModel(
            driver_id=driver_id,
            name=required_text(name, "Name"),
            phone=phone,
            email=email,
            notes=notes,
        )
    )


async def list_saved_riders(
    session: AsyncSession, principal: Principal, driver_id: str
) -> list[SavedRiderModel]:
    require_user(principal, driver_id, allow_admin=False)
    return await SavedRiderRepository(session).get_for_driver(driver_id)


async def get_saved_rider(
    session: AsyncSession, driver_id: str, saved_id: str
) -> SavedRiderModel:
    saved = await SavedRiderRepository(session).get_by_id(saved_id)
    if saved is None or saved.driver_id != driver_id:
        raise SavedRiderNotFoundError("Saved rider not found")
    return saved


async def remove_saved_rider(
    session: AsyncSession, principal: Principal, driver_id: str, saved_id: str
) -> None:
    require_user(principal, driver_id, allow_admin=False)
    saved = await get_saved_rider(session, driver_id, saved_id)
    await SavedRiderRepository(session).delete(saved)
    await flush(session)
