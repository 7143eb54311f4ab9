"""
Ride transfer handshake
=======================

1. The ride's current driver offers it to a colleague
   (``create_transfer_request``).  The ride itself is not locked; the
   original driver may still complete or cancel it meanwhile.
2. The colleague accepts or rejects.  Acceptance re-runs the full
   hand-over checks against the ride *as it is now* and writes the ride
   and the transfer record in the same unit of work.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.domain.entities import TRANSFER_LIFECYCLE, Principal, utcnow
from ridelink.domain.enums import NotificationType, TransferStatus
from ridelink.domain.exceptions import (
    AuthorizationError,
    InvalidRequestError,
    NotAssignedDriverError,
    TransferNotFoundError,
)
from ridelink.infrastructure.models import RideTransferModel
from ridelink.infrastructure.repositories import RideTransferRepository
from .base import flush
from .drivers import get_driver
from .notifications import notify
from .rides import get_ride, hand_over_ride

logger = logging.getLogger(__name__)


async def get_transfer(session: AsyncSession, transfer_id: str) -> RideTransferModel:
    transfer = await RideTransferRepository(session).get_by_id(transfer_id)
    if transfer is None:
        raise TransferNotFoundError("Transfer request not found")
    return transfer


async def create_transfer_request(
    session: AsyncSession,
    principal: Principal,
    ride_id: str,
    new_driver_id: str,
    transfer_fee: float = 0.0,
) -> RideTransferModel:
    ride = await get_ride(session, ride_id)
    if ride.driver_id is None or principal.user_id != ride.driver_id:
        raise NotAssignedDriverError("Only the assigned driver can offer this ride")
    if new_driver_id == ride.driver_id:
        raise InvalidRequestError("Cannot transfer a ride to yourself")
    if transfer_fee < 0:
        raise InvalidRequestError("Transfer fee cannot be negative")
    await get_driver(session, new_driver_id)

    transfer = await RideTransferRepository(session).create(
        RideTransferModel(
            ride_id=ride.id,
            original_driver_id=ride.driver_id,
            new_driver_id=new_driver_id,
            transfer_fee_amount=transfer_fee,
            status=TransferStatus.PENDING,
        )
    )
    notify(
        session,
        user_id=new_driver_id,
        type=NotificationType.TRANSFER_REQUEST,
        title="Ride transfer request",
        message=f"A driver wants to hand ride {ride.id} over to you",
    )
    logger.info(
        "Transfer %s offered: ride %s %s -> %s",
        transfer.id,
        ride.id,
        transfer.original_driver_id,
        new_driver_id,
    )
    return transfer


async def _pending_for_recipient(
    session: AsyncSession, principal: Principal, transfer_id: str, new_status: TransferStatus
) -> RideTransferModel:
    transfer = await get_transfer(session, transfer_id)
    if principal.user_id != transfer.new_driver_id:
        raise AuthorizationError("Only the receiving driver can answer this request")
    TRANSFER_LIFECYCLE.check(transfer.status, new_status)
    return transfer


async def accept_transfer_request(
    session: AsyncSession, principal: Principal, transfer_id: str
) -> RideTransferModel:
    transfer = await _pending_for_recipient(
        session, principal, transfer_id, TransferStatus.ACCEPTED
    )
    ride = await get_ride(session, transfer.ride_id)
    await hand_over_ride(
        session,
        ride,
        transfer.original_driver_id,
        transfer.new_driver_id,
        transfer.transfer_fee_amount,
    )

    transfer.status = TransferStatus.ACCEPTED
    transfer.updated_at = utcnow()
    await flush(session)

    notify(
        session,
        user_id=transfer.original_driver_id,
        type=NotificationType.TRANSFER_UPDATE,
        title="Transfer accepted",
        message=f"Ride {ride.id} now belongs to another driver",
    )
    logger.info("Transfer %s accepted", transfer.id)
    return transfer


async def reject_transfer_request(
    session: AsyncSession, principal: Principal, transfer_id: str
) -> RideTransferModel:
    transfer = await _pending_for_recipient(
        session, principal, transfer_id, TransferStatus.REJECTED
    )
    transfer.status = TransferStatus.REJECTED
    transfer.updated_at = utcnow()
    await flush(session)

    notify(
        session,
        user_id=transfer.original_driver_id,
        type=NotificationType.TRANSFER_UPDATE,
        title="Transfer declined",
        message=f"Your transfer of ride {transfer.ride_id} was declined",
    )
    logger.info("Transfer %s rejected", transfer.id)
    return transfer


async def list_incoming_transfers(
    session: AsyncSession, principal: Principal
) -> list[RideTransferModel]:
    return await RideTransferRepository(session).get_incoming(principal.user_id)


async def transfer_history(
    session: AsyncSession, principal: Principal
) -> list[RideTransferModel]:
    return await RideTransferRepository(session).get_history(principal.user_id)
