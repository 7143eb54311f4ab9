"""
Notification endpoints
======================

GET   /api/v1/notifications            -- caller's notifications, newest first
PATCH /api/v1/notifications/{id}/read  -- mark one read
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import get_db, get_principal
from ridelink.api.middleware import limiter
from ridelink.api.schemas import NotificationResponse
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.services import notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse], summary="List notifications")
@limiter.limit(settings.rate_limit)
async def list_notifications(
    request: Request,
    unread_only: bool = Query(False),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await notifications.list_notifications(db, principal, unread_only)


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark a notification read",
)
@limiter.limit(settings.rate_limit)
async def mark_read(
    request: Request,
    notification_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await notifications.mark_notification_read(db, principal, notification_id)
