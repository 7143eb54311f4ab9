"""
Driver <-> rider connections.

``pending -> accepted | rejected``; only the party that did *not* send
the request may answer it.  Removing a connection deletes the record.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.domain.entities import CONNECTION_LIFECYCLE, Principal, utcnow
from ridelink.domain.enums import ConnectionStatus, NotificationType
from ridelink.domain.exceptions import (
    AuthorizationError,
    ConnectionNotFoundError,
    DuplicateConnectionError,
)
from ridelink.infrastructure.models import ConnectionModel
from ridelink.infrastructure.repositories import ConnectionRepository
from .base import flush, require_user
from .drivers import get_driver
from .notifications import notify
from .riders import get_rider

logger = logging.getLogger(__name__)


async def get_connection(session: AsyncSession, connection_id: str) -> ConnectionModel:
    connection = await ConnectionRepository(session).get_by_id(connection_id)
    if connection is None:
        raise ConnectionNotFoundError("Connection not found")
    return connection


async def are_connected(session: AsyncSession, driver_id: str, rider_id: str) -> bool:
    connection = await ConnectionRepository(session).get_pair(driver_id, rider_id)
    return connection is not None and connection.status is ConnectionStatus.ACCEPTED


async def request_connection(
    session: AsyncSession, principal: Principal, driver_id: str, rider_id: str
) -> ConnectionModel:
    require_user(
        principal,
        driver_id,
        rider_id,
        allow_admin=False,
        message="You can only request connections for yourself",
    )
    await get_driver(session, driver_id)
    await get_rider(session, rider_id)

    repo = ConnectionRepository(session)
    if await repo.get_pair(driver_id, rider_id) is not None:
        raise DuplicateConnectionError("A connection between these users already exists")

    connection = await repo.create(
        ConnectionModel(
            driver_id=driver_id,
            rider_id=rider_id,
            requested_by=principal.user_id,
            status=ConnectionStatus.PENDING,
        )
    )
    requester_kind = "driver" if principal.user_id == driver_id else "rider"
    notify(
        session,
        user_id=rider_id if requester_kind == "driver" else driver_id,
        type=NotificationType.CONNECTION_REQUEST,
        title="New connection request",
        message=f"A {requester_kind} would like to connect with you",
    )
    logger.info("Connection %s requested by %s", connection.id, principal.user_id)
    return connection


async def update_connection_status(
    session: AsyncSession,
    principal: Principal,
    connection_id: str,
    status: ConnectionStatus,
) -> ConnectionModel:
    connection = await get_connection(session, connection_id)
    counterpart = (
        connection.rider_id
        if connection.requested_by == connection.driver_id
        else connection.driver_id
    )
    if principal.user_id != counterpart:
        raise AuthorizationError("Only the invited user can answer a connection request")
    CONNECTION_LIFECYCLE.check(connection.status, status)

    connection.status = status
    connection.updated_at = utcnow()
    await flush(session)

    if status is ConnectionStatus.ACCEPTED:
        notify(
            session,
            user_id=connection.requested_by,
            type=NotificationType.CONNECTION_ACCEPTED,
            title="Connection accepted",
            message="Your connection request was accepted",
        )
    logger.info("Connection %s %s", connection.id, status.value)
    return connection


async def remove_connection(
    session: AsyncSession, principal: Principal, connection_id: str
) -> None:
    connection = await get_connection(session, connection_id)
    require_user(principal, connection.driver_id, connection.rider_id, allow_admin=False)
    await ConnectionRepository(session).delete(connection)
    logger.info("Connection %s removed by %s", connection_id, principal.user_id)


async def list_connections(
    session: AsyncSession, principal: Principal
) -> list[ConnectionModel]:
    return await ConnectionRepository(session).get_for_user(principal.user_id)
