"""
Driver endpoints
================

GET   /api/v1/drivers/available                 -- available drivers, best rated first
POST  /api/v1/drivers                           -- complete driver onboarding
GET   /api/v1/drivers/{driver_id}               -- driver profile
PATCH /api/v1/drivers/{driver_id}               -- edit own profile
PUT   /api/v1/drivers/{driver_id}/availability  -- go online / offline
GET   /api/v1/drivers/{driver_id}/rides         -- rides assigned to the driver
GET   /api/v1/drivers/{driver_id}/saved-riders  -- driver's saved riders
POST  /api/v1/drivers/{driver_id}/saved-riders  -- save a rider
DELETE /api/v1/drivers/{driver_id}/saved-riders/{saved_id}
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import get_db, get_principal
from ridelink.api.middleware import limiter
from ridelink.api.schemas import (
    AvailabilityUpdate,
    DriverRegistrationRequest,
    DriverResponse,
    DriverUpdateRequest,
    RideResponse,
    SavedRiderCreateRequest,
    SavedRiderResponse,
)
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.services import availability, drivers, riders, rides

router = APIRouter(prefix="/drivers", tags=["drivers"])


@router.get(
    "/available",
    response_model=list[DriverResponse],
    summary="List available drivers",
    description=(
        "Drivers that are both available and active, optionally limited to "
        "one location, sorted by rating (highest first)."
    ),
)
@limiter.limit(settings.rate_limit)
async def list_available_drivers(
    request: Request,
    location_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return await availability.list_available_drivers(db, location_id)


@router.post(
    "",
    status_code=201,
    response_model=DriverResponse,
    summary="Register as a driver",
)
@limiter.limit(settings.rate_limit)
async def register_driver(
    request: Request,
    body: DriverRegistrationRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await drivers.register_driver(db, principal, **body.profile())


@router.get("/{driver_id}", response_model=DriverResponse, summary="Get a driver")
@limiter.limit(settings.rate_limit)
async def get_driver(
    request: Request,
    driver_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await drivers.get_driver(db, driver_id)


@router.patch("/{driver_id}", response_model=DriverResponse, summary="Edit own profile")
@limiter.limit(settings.rate_limit)
async def update_driver(
    request: Request,
    driver_id: str,
    body: DriverUpdateRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await drivers.update_driver_profile(db, principal, driver_id, body.changes())


@router.put(
    "/{driver_id}/availability",
    response_model=DriverResponse,
    summary="Toggle availability",
)
@limiter.limit(settings.rate_limit)
async def set_availability(
    request: Request,
    driver_id: str,
    body: AvailabilityUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await drivers.set_availability(db, principal, driver_id, body.available)


@router.get(
    "/{driver_id}/rides",
    response_model=list[RideResponse],
    summary="Rides assigned to a driver, newest first",
)
@limiter.limit(settings.rate_limit)
async def list_driver_rides(
    request: Request,
    driver_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await rides.driver_ride_history(db, principal, driver_id)


@router.get(
    "/{driver_id}/saved-riders",
    response_model=list[SavedRiderResponse],
    summary="List saved riders",
)
@limiter.limit(settings.rate_limit)
async def list_saved_riders(
    request: Request,
    driver_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await riders.list_saved_riders(db, principal, driver_id)


@router.post(
    "/{driver_id}/saved-riders",
    status_code=201,
    response_model=SavedRiderResponse,
    summary="Save a rider",
)
@limiter.limit(settings.rate_limit)
async def add_saved_rider(
    request: Request,
    driver_id: str,
    body: SavedRiderCreateRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await riders.add_saved_rider(db, principal, driver_id, **body.model_dump())


@router.delete(
    "/{driver_id}/saved-riders/{saved_id}",
    status_code=204,
    summary="Remove a saved rider",
)
@limiter.limit(settings.rate_limit)
async def remove_saved_rider(
    request: Request,
    driver_id: str,
    saved_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    await riders.remove_saved_rider(db, principal, driver_id, saved_id)
    return Response(status_code=204)
