"""
Admin / observability endpoints
===============================

GET  /api/v1/admin/health                       -- simple health check
GET  /api/v1/admin/drivers/pending              -- drivers awaiting approval
POST /api/v1/admin/drivers/{driver_id}/review   -- approve or reject a driver
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import get_db, get_principal
from ridelink.api.middleware import limiter
from ridelink.api.schemas import DriverResponse, DriverReviewRequest, HealthResponse
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.services import drivers

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get(
    "/drivers/pending",
    response_model=list[DriverResponse],
    summary="List drivers awaiting approval",
)
@limiter.limit(settings.rate_limit)
async def list_pending_drivers(
    request: Request,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await drivers.list_pending_drivers(db, principal)


@router.post(
    "/drivers/{driver_id}/review",
    response_model=DriverResponse,
    summary="Approve or reject a driver",
)
@limiter.limit(settings.rate_limit)
async def review_driver(
    request: Request,
    driver_id: str,
    body: DriverReviewRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await drivers.review_driver(db, principal, driver_id, body.decision)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
