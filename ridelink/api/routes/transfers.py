"""
Transfer request endpoints
==========================

POST /api/v1/transfers                  -- offer a ride to another driver
GET  /api/v1/transfers/incoming         -- pending offers addressed to the caller
GET  /api/v1/transfers/history          -- all offers the caller sent or received
POST /api/v1/transfers/{id}/accept      -- take the ride over
POST /api/v1/transfers/{id}/reject      -- decline the offer
"""

from __future__ import annotations

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import get_db, get_principal, get_redis_client
from ridelink.api.middleware import limiter
from ridelink.api.schemas import TransferCreateRequest, TransferResponse
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.infrastructure.locks import ride_lock
from ridelink.services import transfers

router = APIRouter(prefix="/transfers", tags=["transfers"])


@router.post(
    "",
    status_code=201,
    response_model=TransferResponse,
    summary="Request a ride transfer",
)
@limiter.limit(settings.rate_limit)
async def create_transfer(
    request: Request,
    body: TransferCreateRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await transfers.create_transfer_request(
        db, principal, body.ride_id, body.new_driver_id, body.transfer_fee_amount
    )


@router.get("/incoming", response_model=list[TransferResponse], summary="Incoming requests")
@limiter.limit(settings.rate_limit)
async def list_incoming(
    request: Request,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await transfers.list_incoming_transfers(db, principal)


@router.get("/history", response_model=list[TransferResponse], summary="Transfer history")
@limiter.limit(settings.rate_limit)
async def list_history(
    request: Request,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await transfers.transfer_history(db, principal)


@router.post(
    "/{transfer_id}/accept",
    response_model=TransferResponse,
    summary="Accept a transfer request",
)
@limiter.limit(settings.rate_limit)
async def accept_transfer(
    request: Request,
    transfer_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis_client),
):
    pending = await transfers.get_transfer(db, transfer_id)
    async with ride_lock(redis, pending.ride_id, settings.ride_lock_ttl_seconds):
        transfer = await transfers.accept_transfer_request(db, principal, transfer_id)
        await db.commit()
    return transfer


@router.post(
    "/{transfer_id}/reject",
    response_model=TransferResponse,
    summary="Reject a transfer request",
)
@limiter.limit(settings.rate_limit)
async def reject_transfer(
    request: Request,
    transfer_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await transfers.reject_transfer_request(db, principal, transfer_id)
