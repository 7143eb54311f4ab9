"""
Scheduled rides.

A driver books one of their saved riders; a rider books a driver they are
connected with.  Cancelling keeps the record with status ``cancelled``.
"""

from __future__ import annotations

import logging
from datetime import date, time
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.domain.entities import SCHEDULED_RIDE_LIFECYCLE, Principal, utcnow
from ridelink.domain.enums import NotificationType, ScheduledRideStatus
from ridelink.domain.exceptions import (
    AuthorizationError,
    InvalidRequestError,
    ScheduledRideNotFoundError,
)
from ridelink.infrastructure.models import ScheduledRideModel
from ridelink.infrastructure.repositories import ScheduledRideRepository
from .base import flush, require_user, required_text
from .connections import are_connected
from .drivers import get_driver
from .notifications import notify
from .riders import get_rider, get_saved_rider

logger = logging.getLogger(__name__)

DRIVER_ONLY_STATUSES = frozenset({ScheduledRideStatus.CONFIRMED, ScheduledRideStatus.COMPLETED})


async def schedule_ride(
    session: AsyncSession,
    principal: Principal,
    *,
    ride_date: date,
    ride_time: time,
    pickup: str,
    dropoff: str,
    notes: Optional[str] = None,
    saved_rider_id: Optional[str] = None,
    driver_id: Optional[str] = None,
) -> ScheduledRideModel:
    pickup = required_text(pickup, "Pickup")
    dropoff = required_text(dropoff, "Dropoff")

    if saved_rider_id:
        # Driver booking one of their own saved riders.
        saved = await get_saved_rider(session, principal.user_id, saved_rider_id)
        ride = ScheduledRideModel(
            driver_id=principal.user_id, rider_id=None, rider_name=saved.name
        )
    elif driver_id:
        rider = await get_rider(session, principal.user_id)
        await get_driver(session, driver_id)
        if not await are_connected(session, driver_id, rider.id):
            raise AuthorizationError("Scheduling requires an accepted connection")
        ride = ScheduledRideModel(driver_id=driver_id, rider_id=rider.id, rider_name=rider.name)
    else:
        raise InvalidRequestError("Provide a saved rider or a driver to schedule with")

    ride.date = ride_date
    ride.time = ride_time
    ride.pickup = pickup
    ride.dropoff = dropoff
    ride.notes = notes
    ride.status = ScheduledRideStatus.PENDING
    ride = await ScheduledRideRepository(session).create(ride)

    if ride.rider_id:
        notify(
            session,
            user_id=ride.driver_id,
            type=NotificationType.RIDE_REQUEST,
            title="New scheduled ride",
            message=f"{ride.rider_name} scheduled a ride on {ride_date.isoformat()}",
        )
    logger.info("Scheduled ride %s for %s %s", ride.id, ride_date, ride_time)
    return ride


async def get_scheduled_ride(session: AsyncSession, ride_id: str) -> ScheduledRideModel:
    ride = await ScheduledRideRepository(session).get_by_id(ride_id)
    if ride is None:
        raise ScheduledRideNotFoundError("Scheduled ride not found")
    return ride


async def list_schedule(
    session: AsyncSession, principal: Principal
) -> list[ScheduledRideModel]:
    return await ScheduledRideRepository(session).get_for_user(principal.user_id)


async def update_scheduled_status(
    session: AsyncSession,
    principal: Principal,
    ride_id: str,
    status: ScheduledRideStatus,
) -> ScheduledRideModel:
    ride = await get_scheduled_ride(session, ride_id)
    if status in DRIVER_ONLY_STATUSES:
        require_user(principal, ride.driver_id, allow_admin=False)
    else:
        require_user(principal, ride.driver_id, ride.rider_id, allow_admin=False)
    SCHEDULED_RIDE_LIFECYCLE.check(ride.status, status)

    ride.status = status
    ride.updated_at = utcnow()
    await flush(session)

    if principal.user_id == ride.driver_id:
        notify(
            session,
            user_id=ride.rider_id,
            type=NotificationType.RIDE_UPDATE,
            title="Scheduled ride updated",
            message=f"Your ride on {ride.date.isoformat()} is {status.value}",
        )
    logger.info("Scheduled ride %s -> %s", ride.id, status.value)
    return ride


async def cancel_scheduled_ride(
    session: AsyncSession, principal: Principal, ride_id: str
) -> ScheduledRideModel:
    return await update_scheduled_status(
        session, principal, ride_id, ScheduledRideStatus.CANCELLED
    )
