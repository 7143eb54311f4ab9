"""
Ride lifecycle workflows
========================

Creation
--------
``create_ride`` snapshots the drivers available in the ride's location at
that instant (``available_drivers``; never refreshed) and starts the ride
as ``assigned`` when the rider picked a driver, ``pending`` otherwise.
There is no idempotency key: submitting the same request twice creates
two rides.

Assignment / transfer
---------------------
Every status write goes through ``RIDE_LIFECYCLE``::

    pending     -> assigned | transferred | cancelled
    assigned    -> completed | cancelled | transferred
    transferred -> assigned          (the new driver accepts)

Ownership and eligibility are checked here against the caller's
``Principal``, never against ids the client claims for itself.

Atomicity
---------
Nothing in this module commits.  The caller's session is the unit of
work, so a ride write, the driver counters and any notifications either
all land or none do.  Rides are version-checked on flush; a lost race
surfaces as ``ConcurrentModificationError``.  The ride-request webhook waits
on the session and is only queued once that commit succeeds.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.config import settings
from ridelink.domain.entities import (
    RIDE_LIFECYCLE,
    DriverCard,
    Principal,
    is_eligible_for_assignment,
    utcnow,
)
from ridelink.domain.enums import NotificationType, RideStatus
from ridelink.domain.exceptions import (
    AuthorizationError,
    DriverNotAvailableError,
    DriverNotFoundError,
    InvalidRequestError,
    NotAssignedDriverError,
    RideNotFoundError,
)
from ridelink.domain.locations import is_known_location
from ridelink.infrastructure.models import DriverModel, RideModel
from ridelink.infrastructure.repositories import DriverRepository, RideRepository
from . import webhooks
from .availability import list_available_drivers
from .base import flush, required_text
from .notifications import notify

logger = logging.getLogger(__name__)


def _card(driver: DriverModel) -> DriverCard:
    return DriverCard.from_driver(driver, default_rating=settings.default_driver_rating)


async def get_ride(session: AsyncSession, ride_id: str) -> RideModel:
    ride = await RideRepository(session).get_by_id(ride_id)
    if ride is None:
        raise RideNotFoundError(f"Ride {ride_id} not found")
    return ride


async def list_rides_for_driver(session: AsyncSession, driver_id: str) -> list[RideModel]:
    return await RideRepository(session).get_for_driver(driver_id)


async def list_open_rides(
    session: AsyncSession, location_id: Optional[str] = None
) -> list[RideModel]:
    return await RideRepository(session).get_open_rides(location_id)


# ── Reads on behalf of a caller ───────────────────────────────────────
# Rides carry the customer's name and phone, so reads are scoped to the
# people involved.  Registered drivers may also see rides still waiting
# for a driver.


async def _is_driver(session: AsyncSession, principal: Principal) -> bool:
    return await DriverRepository(session).get_by_id(principal.user_id) is not None


async def view_ride(
    session: AsyncSession, principal: Principal, ride_id: str
) -> RideModel:
    ride = await get_ride(session, ride_id)
    if principal.is_admin or principal.is_any(
        ride.rider_id, ride.driver_id, ride.previous_driver_id
    ):
        return ride
    if ride.status is RideStatus.PENDING and await _is_driver(session, principal):
        return ride
    raise AuthorizationError(f"Not allowed to view ride {ride_id}")


async def browse_open_rides(
    session: AsyncSession, principal: Principal, location_id: Optional[str] = None
) -> list[RideModel]:
    if not (principal.is_admin or await _is_driver(session, principal)):
        raise AuthorizationError("Only drivers can browse open rides")
    return await list_open_rides(session, location_id)


async def driver_ride_history(
    session: AsyncSession, principal: Principal, driver_id: str
) -> list[RideModel]:
    if not (principal.is_admin or principal.user_id == driver_id):
        raise AuthorizationError("Only the driver or an admin can list these rides")
    return await list_rides_for_driver(session, driver_id)


# ── Creation ──────────────────────────────────────────────────────────


async def create_ride(
    session: AsyncSession,
    *,
    name: str,
    phone: str,
    location_id: str,
    pickup: Optional[str] = None,
    dropoff: Optional[str] = None,
    selected_driver_id: Optional[str] = None,
    principal: Optional[Principal] = None,
) -> RideModel:
    name = required_text(name, "Name")
    phone = required_text(phone, "Phone")
    if not is_known_location(location_id):
        raise InvalidRequestError(f"Unknown location: {location_id}")

    candidates = [_card(d) for d in await list_available_drivers(session, location_id)]
    now = utcnow()

    status = RideStatus.PENDING
    assigned = None
    if selected_driver_id:
        selected = next((c for c in candidates if c.id == selected_driver_id), None)
        if selected is None:
            raise DriverNotAvailableError(
                f"Driver {selected_driver_id} is not available in {location_id}"
            )
        status = RideStatus.ASSIGNED
        assigned = selected.as_dict(assignedAt=now.isoformat())

    ride = await RideRepository(session).create(
        RideModel(
            rider_id=principal.user_id if principal else None,
            customer_name=name,
            phone=phone,
            pickup=pickup or "",
            dropoff=dropoff or "",
            location_id=location_id,
            status=status,
            driver_id=selected_driver_id or None,
            assigned_driver=assigned,
            available_drivers=[c.as_dict() for c in candidates],
            scheduled_time=now,
            created_at=now,
            updated_at=now,
        )
    )
    logger.info(
        "Ride %s created in %s (%s, %d candidate drivers)",
        ride.id,
        location_id,
        status.value,
        len(candidates),
    )

    if selected_driver_id:
        notify(
            session,
            user_id=selected_driver_id,
            type=NotificationType.RIDE_REQUEST,
            title="New ride request",
            message=f"{name} booked a ride with you",
        )
    webhooks.submit_ride_request(session, ride)
    return ride


# ── Assignment ────────────────────────────────────────────────────────


async def assign_driver(
    session: AsyncSession, principal: Principal, ride_id: str, driver_id: str
) -> RideModel:
    ride = await get_ride(session, ride_id)
    if ride.status is RideStatus.TRANSFERRED:
        # Accepting a hand-over belongs to the new driver alone
        if ride.driver_id != driver_id or not (
            principal.is_admin or principal.user_id == ride.driver_id
        ):
            raise NotAssignedDriverError(
                "Only the driver the ride was transferred to can accept it"
            )
    elif not (principal.is_admin or principal.is_any(driver_id, ride.rider_id)):
        raise AuthorizationError("Only the rider, the driver or an admin can assign")

    RIDE_LIFECYCLE.check(ride.status, RideStatus.ASSIGNED)

    driver = await DriverRepository(session).get_by_id(driver_id)
    if driver is None:
        raise DriverNotFoundError(f"Driver {driver_id} not found")
    if not is_eligible_for_assignment(driver):
        raise DriverNotAvailableError(f"Driver {driver_id} is not available")

    now = utcnow()
    ride.driver_id = driver.id
    ride.assigned_driver = _card(driver).as_dict(assignedAt=now.isoformat())
    ride.status = RideStatus.ASSIGNED
    ride.updated_at = now
    await flush(session)

    notify(
        session,
        user_id=ride.rider_id,
        type=NotificationType.RIDE_ACCEPTED,
        title="Driver assigned",
        message=f"{driver.name} will pick you up",
    )
    logger.info("Ride %s assigned to driver %s", ride.id, driver.id)
    return ride


# ── Transfer ──────────────────────────────────────────────────────────


async def hand_over_ride(
    session: AsyncSession,
    ride: RideModel,
    from_driver_id: str,
    to_driver_id: str,
    transfer_fee: Optional[float] = None,
) -> RideModel:
    """Move *ride* from one driver to another.  Raises before any write."""
    if ride.driver_id != from_driver_id:
        raise NotAssignedDriverError(
            f"Ride {ride.id} is not assigned to driver {from_driver_id}"
        )
    if from_driver_id == to_driver_id:
        raise InvalidRequestError("A ride cannot be transferred to its current driver")
    RIDE_LIFECYCLE.check(ride.status, RideStatus.TRANSFERRED)

    target = await DriverRepository(session).get_by_id(to_driver_id)
    if target is None:
        raise DriverNotFoundError(f"Driver {to_driver_id} not found")
    if not is_eligible_for_assignment(target):
        raise DriverNotAvailableError(f"Driver {to_driver_id} is not available")

    now = utcnow()
    ride.previous_driver_id = from_driver_id
    ride.driver_id = target.id
    ride.assigned_driver = _card(target).as_dict(assignedAt=now.isoformat())
    ride.status = RideStatus.TRANSFERRED
    ride.transferred_at = now
    ride.updated_at = now
    if transfer_fee is not None:
        ride.transfer_fee_amount = transfer_fee
    await flush(session)

    logger.info("Ride %s transferred from %s to %s", ride.id, from_driver_id, to_driver_id)
    return ride


async def transfer_ride(
    session: AsyncSession,
    principal: Principal,
    ride_id: str,
    from_driver_id: str,
    to_driver_id: str,
    transfer_fee: Optional[float] = None,
) -> RideModel:
    if not (principal.is_admin or principal.user_id == from_driver_id):
        raise NotAssignedDriverError("Only the assigned driver can transfer this ride")
    ride = await get_ride(session, ride_id)
    ride = await hand_over_ride(session, ride, from_driver_id, to_driver_id, transfer_fee)
    notify(
        session,
        user_id=to_driver_id,
        type=NotificationType.TRANSFER_REQUEST,
        title="Ride transferred to you",
        message=f"Ride {ride.id} was handed over to you",
    )
    return ride


# ── Completion / cancellation ─────────────────────────────────────────


async def complete_ride(
    session: AsyncSession, principal: Principal, ride_id: str
) -> RideModel:
    """Mark the ride completed and bump the driver's counters together."""
    ride = await get_ride(session, ride_id)
    if not (principal.is_admin or principal.user_id == ride.driver_id):
        raise NotAssignedDriverError("Only the assigned driver can complete this ride")
    RIDE_LIFECYCLE.check(ride.status, RideStatus.COMPLETED)

    now = utcnow()
    ride.status = RideStatus.COMPLETED
    ride.completed_at = now
    ride.updated_at = now
    await flush(session)

    updated = await DriverRepository(session).increment_ride_counters(ride.driver_id)
    if not updated:
        raise DriverNotFoundError(f"Driver {ride.driver_id} not found")

    notify(
        session,
        user_id=ride.rider_id,
        type=NotificationType.RIDE_UPDATE,
        title="Ride completed",
        message="Thanks for riding!",
    )
    logger.info("Ride %s completed by driver %s", ride.id, ride.driver_id)
    return ride


async def cancel_ride(
    session: AsyncSession, principal: Principal, ride_id: str
) -> RideModel:
    ride = await get_ride(session, ride_id)
    if not (principal.is_admin or principal.is_any(ride.rider_id, ride.driver_id)):
        raise AuthorizationError("Only the rider, the driver or an admin can cancel")
    RIDE_LIFECYCLE.check(ride.status, RideStatus.CANCELLED)

    ride.status = RideStatus.CANCELLED
    ride.updated_at = utcnow()
    await flush(session)

    counterpart = ride.driver_id if principal.user_id == ride.rider_id else ride.rider_id
    notify(
        session,
        user_id=counterpart,
        type=NotificationType.RIDE_UPDATE,
        title="Ride cancelled",
        message=f"Ride {ride.id} was cancelled",
    )
    logger.info("Ride %s cancelled by %s", ride.id, principal.user_id)
    return ride


async def update_ride_status(
    session: AsyncSession, principal: Principal, ride_id: str, status: RideStatus
) -> RideModel:
    """Route a raw status change to the workflow that owns it."""
    if status is RideStatus.COMPLETED:
        return await complete_ride(session, principal, ride_id)
    if status is RideStatus.CANCELLED:
        return await cancel_ride(session, principal, ride_id)

    ride = await get_ride(session, ride_id)
    if status is RideStatus.ASSIGNED and ride.driver_id:
        return await assign_driver(session, principal, ride_id, ride.driver_id)

    RIDE_LIFECYCLE.check(ride.status, status)
    raise InvalidRequestError(
        f"Status {status.value} is set by the assign or transfer workflow"
    )
