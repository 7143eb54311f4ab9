"""
Driver directory workflows: onboarding, profile edits, the availability
toggle, and admin review.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.domain.enums import ApprovalStatus, NotificationType
from ridelink.domain.exceptions import (
    DriverAlreadyRegisteredError,
    DriverNotAvailableError,
    DriverNotFoundError,
    InvalidRequestError,
)
from ridelink.domain.locations import is_known_location
from ridelink.infrastructure.models import DriverModel
from ridelink.infrastructure.repositories import DriverRepository
from . import webhooks
from .base import flush, require_admin, require_user, required_text
from .notifications import notify

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"name", "email", "phone", "photo_url", "location_id", "vehicle", "drivers_license"}
)


def _check_location(location_id: str) -> str:
    if not is_known_location(location_id):
        raise InvalidRequestError(f"Unknown location: {location_id}")
    return location_id


async def get_driver(session: AsyncSession, driver_id: str) -> DriverModel:
    driver = await DriverRepository(session).get_by_id(driver_id)
    if driver is None:
        raise DriverNotFoundError(f"Driver {driver_id} not found")
    return driver


async def register_driver(
    session: AsyncSession,
    principal: Principal,
    *,
    name: str,
    email: str,
    location_id: str,
    phone: Optional[str] = None,
    photo_url: Optional[str] = None,
    vehicle: Optional[dict[str, Any]] = None,
    drivers_license: Optional[dict[str, Any]] = None,
) -> DriverModel:
    """Complete onboarding: the driver record is keyed by the caller's id."""
    repo = DriverRepository(session)
    if await repo.get_by_id(principal.user_id) is not None:
        raise DriverAlreadyRegisteredError("Driver profile already exists")

    driver = await repo.create(
        DriverModel(
            id=principal.user_id,
            name=required_text(name, "Name"),
            email=required_text(email, "Email"),
            phone=phone,
            photo_url=photo_url,
            location_id=_check_location(location_id),
            vehicle=vehicle,
            drivers_license=drivers_license,
            rating=settings.default_driver_rating,
            available=False,
            is_active=True,
            approval_status=ApprovalStatus.PENDING,
            total_rides=0,
            completed_rides=0,
        )
    )
    logger.info("Driver %s registered in %s", driver.id, driver.location_id)
    webhooks.submit_driver_registration(session, driver)
    return driver


async def update_driver_profile(
    session: AsyncSession, principal: Principal, driver_id: str, changes: dict[str, Any]
) -> DriverModel:
    require_user(principal, driver_id, allow_admin=False)
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise InvalidRequestError(f"Fields not editable: {', '.join(sorted(unknown))}")

    driver = await get_driver(session, driver_id)
    for key, value in changes.items():
        if key == "location_id":
            value = _check_location(value)
        elif key in ("name", "email"):
            value = required_text(value, key.capitalize())
        setattr(driver, key, value)
    await flush(session)
    return driver


async def set_availability(
    session: AsyncSession, principal: Principal, driver_id: str, available: bool
) -> DriverModel:
    require_user(principal, driver_id, allow_admin=False)
    driver = await get_driver(session, driver_id)
    if available and not driver.is_active:
        raise DriverNotAvailableError("Inactive drivers cannot go online")
    driver.available = available
    await flush(session)
    logger.info("Driver %s is now %s", driver_id, "online" if available else "offline")
    return driver


async def list_pending_drivers(
    session: AsyncSession, principal: Principal
) -> list[DriverModel]:
    require_admin(principal)
    return await DriverRepository(session).get_pending_approval()


async def review_driver(
    session: AsyncSession,
    principal: Principal,
    driver_id: str,
    decision: ApprovalStatus,
) -> DriverModel:
    require_admin(principal)
    if decision not in (ApprovalStatus.APPROVED, ApprovalStatus.REJECTED):
        raise InvalidRequestError("Decision must be approved or rejected")

    driver = await get_driver(session, driver_id)
    driver.approval_status = decision
    if decision is ApprovalStatus.APPROVED:
        driver.is_active = True
    else:
        driver.is_active = False
        driver.available = False
    await flush(session)

    notify(
        session,
        user_id=driver.id,
        type=NotificationType.SYSTEM,
        title="Application reviewed",
        message=f"Your driver application was {decision.value}",
    )
    logger.info("Driver %s %s by %s", driver_id, decision.value, principal.user_id)
    return driver
