"""
Ride endpoints
==============

POST  /api/v1/rides                     -- book a ride (optionally with a chosen driver)
GET   /api/v1/rides                     -- open (pending) rides, oldest first (drivers)
GET   /api/v1/rides/{ride_id}           -- ride details (participants)
POST  /api/v1/rides/{ride_id}/assign    -- a driver takes the ride
POST  /api/v1/rides/{ride_id}/transfer  -- hand the ride to another driver
PATCH /api/v1/rides/{ride_id}/status    -- generic status change
POST  /api/v1/rides/{ride_id}/complete  -- mark completed, bump driver counters
POST  /api/v1/rides/{ride_id}/cancel    -- cancel the ride
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import (
    get_db,
    get_optional_principal,
    get_principal,
    get_redis_client,
)
from ridelink.api.middleware import limiter
from ridelink.api.schemas import (
    AssignDriverRequest,
    RideCreateRequest,
    RideResponse,
    RideStatusUpdate,
    RideTransferRequest,
)
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.infrastructure.locks import ride_lock
from ridelink.services import rides

router = APIRouter(prefix="/rides", tags=["rides"])


@router.post(
    "",
    status_code=201,
    response_model=RideResponse,
    summary="Create a ride request",
    description=(
        "Snapshots the drivers currently available in the location. When a "
        "driver is selected the ride starts ASSIGNED, otherwise PENDING."
    ),
)
@limiter.limit(settings.rate_limit)
async def create_ride(
    request: Request,
    body: RideCreateRequest,
    principal: Optional[Principal] = Depends(get_optional_principal),
    db: AsyncSession = Depends(get_db),
):
    return await rides.create_ride(
        db,
        name=body.name,
        phone=body.phone,
        location_id=body.location_id,
        pickup=body.pickup,
        dropoff=body.dropoff,
        selected_driver_id=body.selected_driver_id,
        principal=principal,
    )


@router.get("", response_model=list[RideResponse], summary="List open rides")
@limiter.limit(settings.rate_limit)
async def list_open_rides(
    request: Request,
    location_id: Optional[str] = Query(None),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await rides.browse_open_rides(db, principal, location_id)


@router.get("/{ride_id}", response_model=RideResponse, summary="Get a ride")
@limiter.limit(settings.rate_limit)
async def get_ride(
    request: Request,
    ride_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await rides.view_ride(db, principal, ride_id)


@router.post("/{ride_id}/assign", response_model=RideResponse, summary="Assign a driver")
@limiter.limit(settings.rate_limit)
async def assign_driver(
    request: Request,
    ride_id: str,
    body: AssignDriverRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await rides.assign_driver(db, principal, ride_id, body.driver_id)


@router.post(
    "/{ride_id}/transfer",
    response_model=RideResponse,
    summary="Transfer a ride to another driver",
    description=(
        "Only the currently assigned driver may hand the ride over, and only "
        "to a driver who is available and active. Serialised per ride."
    ),
)
@limiter.limit(settings.rate_limit)
async def transfer_ride(
    request: Request,
    ride_id: str,
    body: RideTransferRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis_client),
):
    async with ride_lock(redis, ride_id, settings.ride_lock_ttl_seconds):
        ride = await rides.transfer_ride(
            db,
            principal,
            ride_id,
            body.from_driver_id,
            body.to_driver_id,
            body.transfer_fee_amount,
        )
        await db.commit()
    return ride


@router.patch("/{ride_id}/status", response_model=RideResponse, summary="Change ride status")
@limiter.limit(settings.rate_limit)
async def update_ride_status(
    request: Request,
    ride_id: str,
    body: RideStatusUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await rides.update_ride_status(db, principal, ride_id, body.status)


@router.post("/{ride_id}/complete", response_model=RideResponse, summary="Complete a ride")
@limiter.limit(settings.rate_limit)
async def complete_ride(
    request: Request,
    ride_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await rides.complete_ride(db, principal, ride_id)


@router.post("/{ride_id}/cancel", response_model=RideResponse, summary="Cancel a ride")
@limiter.limit(settings.rate_limit)
async def cancel_ride(
    request: Request,
    ride_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await rides.cancel_ride(db, principal, ride_id)
