"""
Location catalog
================

GET /api/v1/locations -- service areas drivers and rides are tied to
"""

from fastapi import APIRouter, Request

from ridelink.api.middleware import limiter
from ridelink.api.schemas import LocationResponse
from ridelink.config import settings
from ridelink.domain.locations import LOCATIONS

router = APIRouter(prefix="/locations", tags=["locations"])


@router.get("", response_model=list[LocationResponse], summary="List service areas")
@limiter.limit(settings.rate_limit)
async def list_locations(request: Request):
    return LOCATIONS
