"""
Messaging endpoints
===================

A conversation is addressed either by ``rideId`` (rider <-> assigned
driver) or by a ``driverId`` + ``riderId`` pair with an accepted
connection.

GET   /api/v1/messages             -- messages in a conversation, oldest first
POST  /api/v1/messages             -- send a message
PATCH /api/v1/messages/{id}/read   -- mark one message read
POST  /api/v1/messages/read        -- mark a whole conversation read
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import get_db, get_principal
from ridelink.api.middleware import limiter
from ridelink.api.schemas import (
    ConversationRef,
    MessageCreateRequest,
    MessageResponse,
    ReadCountResponse,
)
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.services import messaging

router = APIRouter(prefix="/messages", tags=["messages"])


@router.get("", response_model=list[MessageResponse], summary="List conversation messages")
@limiter.limit(settings.rate_limit)
async def list_messages(
    request: Request,
    ride_id: Optional[str] = Query(None),
    driver_id: Optional[str] = Query(None),
    rider_id: Optional[str] = Query(None),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await messaging.list_messages(
        db, principal, ride_id=ride_id, driver_id=driver_id, rider_id=rider_id
    )


@router.post("", status_code=201, response_model=MessageResponse, summary="Send a message")
@limiter.limit(settings.rate_limit)
async def send_message(
    request: Request,
    body: MessageCreateRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await messaging.send_message(db, principal, body.content, **body.target())


@router.post("/read", response_model=ReadCountResponse, summary="Mark a conversation read")
@limiter.limit(settings.rate_limit)
async def mark_conversation_read(
    request: Request,
    body: ConversationRef,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    updated = await messaging.mark_conversation_read(db, principal, **body.target())
    return ReadCountResponse(updated=updated)


@router.patch("/{message_id}/read", response_model=MessageResponse, summary="Mark a message read")
@limiter.limit(settings.rate_limit)
async def mark_message_read(
    request: Request,
    message_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await messaging.mark_message_read(db, principal, message_id)
