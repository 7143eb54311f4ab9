"""
Availability Service
====================

``list_available_drivers`` re-reads the full filtered driver set on every
call (no pagination, no caching) and ranks it by rating.  Store errors
propagate to the caller.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.domain.availability import rank_by_rating
from ridelink.domain.locations import is_known_location
from ridelink.infrastructure.models import DriverModel
from ridelink.infrastructure.repositories import DriverRepository

logger = logging.getLogger(__name__)


async def list_available_drivers(
    session: AsyncSession, location_id: Optional[str] = None
) -> list[DriverModel]:
    if location_id is not None and not is_known_location(location_id):
        logger.warning("Unknown location id %r; no drivers listed", location_id)
        return []

    drivers = await DriverRepository(session).get_available(location_id)
    ranked = rank_by_rating(drivers)
    logger.info(
        "Found %d available drivers (location=%s)", len(ranked), location_id or "any"
    )
    return ranked
