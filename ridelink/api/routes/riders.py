"""
Rider endpoints
===============

POST /api/v1/riders            -- create the caller's rider profile
GET  /api/v1/riders/{rider_id} -- rider profile
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import get_db, get_principal
from ridelink.api.middleware import limiter
from ridelink.api.schemas import RiderRegistrationRequest, RiderResponse
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.services import riders

router = APIRouter(prefix="/riders", tags=["riders"])


@router.post("", status_code=201, response_model=RiderResponse, summary="Register as a rider")
@limiter.limit(settings.rate_limit)
async def register_rider(
    request: Request,
    body: RiderRegistrationRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await riders.register_rider(db, principal, **body.model_dump())


@router.get("/{rider_id}", response_model=RiderResponse, summary="Get a rider")
@limiter.limit(settings.rate_limit)
async def get_rider(
    request: Request,
    rider_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await riders.get_rider(db, rider_id)
