"""
Scheduled ride endpoints
========================

GET   /api/v1/schedule              -- caller's scheduled rides (as driver or rider)
POST  /api/v1/schedule              -- book a future ride
PATCH /api/v1/schedule/{id}         -- confirm / complete / cancel
POST  /api/v1/schedule/{id}/cancel  -- cancel
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import get_db, get_principal
from ridelink.api.middleware import limiter
from ridelink.api.schemas import (
    ScheduleCreateRequest,
    ScheduledRideResponse,
    ScheduleStatusUpdate,
)
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.services import scheduling

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.get("", response_model=list[ScheduledRideResponse], summary="List scheduled rides")
@limiter.limit(settings.rate_limit)
async def list_schedule(
    request: Request,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await scheduling.list_schedule(db, principal)


@router.post(
    "",
    status_code=201,
    response_model=ScheduledRideResponse,
    summary="Schedule a ride",
    description=(
        "Drivers schedule for one of their saved riders (``savedRiderId``); "
        "riders schedule with a connected driver (``driverId``)."
    ),
)
@limiter.limit(settings.rate_limit)
async def schedule_ride(
    request: Request,
    body: ScheduleCreateRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await scheduling.schedule_ride(
        db,
        principal,
        ride_date=body.date,
        ride_time=body.time,
        pickup=body.pickup,
        dropoff=body.dropoff,
        notes=body.notes,
        saved_rider_id=body.saved_rider_id,
        driver_id=body.driver_id,
    )


@router.patch(
    "/{scheduled_id}",
    response_model=ScheduledRideResponse,
    summary="Change a scheduled ride's status",
)
@limiter.limit(settings.rate_limit)
async def update_scheduled_ride(
    request: Request,
    scheduled_id: str,
    body: ScheduleStatusUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await scheduling.update_scheduled_status(db, principal, scheduled_id, body.status)


@router.post(
    "/{scheduled_id}/cancel",
    response_model=ScheduledRideResponse,
    summary="Cancel a scheduled ride",
)
@limiter.limit(settings.rate_limit)
async def cancel_scheduled_ride(
    request: Request,
    scheduled_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await scheduling.cancel_scheduled_ride(db, principal, scheduled_id)
