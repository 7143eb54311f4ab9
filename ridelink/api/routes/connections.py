"""
Connection endpoints
====================

GET    /api/v1/connections       -- caller's connections
POST   /api/v1/connections       -- request a driver/rider connection
PATCH  /api/v1/connections/{id}  -- accept or reject
DELETE /api/v1/connections/{id}  -- remove the connection
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.api.dependencies import get_db, get_principal
from ridelink.api.middleware import limiter
from ridelink.api.schemas import (
    ConnectionCreateRequest,
    ConnectionResponse,
    ConnectionStatusUpdate,
)
from ridelink.config import settings
from ridelink.domain.entities import Principal
from ridelink.services import connections

router = APIRouter(prefix="/connections", tags=["connections"])


@router.get("", response_model=list[ConnectionResponse], summary="List connections")
@limiter.limit(settings.rate_limit)
async def list_connections(
    request: Request,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await connections.list_connections(db, principal)


@router.post(
    "",
    status_code=201,
    response_model=ConnectionResponse,
    summary="Request a connection",
)
@limiter.limit(settings.rate_limit)
async def request_connection(
    request: Request,
    body: ConnectionCreateRequest,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await connections.request_connection(
        db, principal, body.driver_id, body.rider_id
    )


@router.patch(
    "/{connection_id}",
    response_model=ConnectionResponse,
    summary="Respond to a connection request",
)
@limiter.limit(settings.rate_limit)
async def update_connection(
    request: Request,
    connection_id: str,
    body: ConnectionStatusUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    return await connections.update_connection_status(
        db, principal, connection_id, body.status
    )


@router.delete("/{connection_id}", status_code=204, summary="Remove a connection")
@limiter.limit(settings.rate_limit)
async def remove_connection(
    request: Request,
    connection_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db),
):
    await connections.remove_connection(db, principal, connection_id)
    return Response(status_code=204)
