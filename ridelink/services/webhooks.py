"""Payloads for the two outbound webhooks: entity fields + ``type`` + ``timestamp``."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from ridelink.config import settings
from ridelink.domain.entities import utcnow
from ridelink.infrastructure.models import DriverModel, RideModel
from ridelink.workers import webhooks as dispatcher

logger = logging.getLogger(__name__)

RIDE_REQUEST_EVENT = "ride_request"
DRIVER_REGISTRATION_EVENT = "driver_registration_complete"


def ride_request_payload(ride: RideModel) -> dict[str, Any]:
    return {
        "id": ride.id,
        "name": ride.customer_name,
        "phone": ride.phone,
        "pickup": ride.pickup,
        "dropoff": ride.dropoff,
        "locationId": ride.location_id,
        "selectedDriverId": ride.driver_id,
        "type": RIDE_REQUEST_EVENT,
        "timestamp": utcnow().isoformat(),
    }


def driver_registration_payload(driver: DriverModel) -> dict[str, Any]:
    return {
        "id": driver.id,
        "name": driver.name,
        "email": driver.email,
        "phone": driver.phone,
        "locationId": driver.location_id,
        "vehicle": driver.vehicle,
        "type": DRIVER_REGISTRATION_EVENT,
        "timestamp": utcnow().isoformat(),
    }

# ── Commit-bound submission ───────────────────────────────────────────
# Events wait on the session until its transaction commits; a rollback
# discards them, so no webhook describes a record that was never stored.

_PENDING_KEY = "pending_webhooks"


def _defer(session: AsyncSession, url: str, payload: dict[str, Any]) -> bool:
    session.info.setdefault(_PENDING_KEY, []).append((url, payload))
    return True


@event.listens_for(Session, "after_commit")
def _release_pending(session: Session) -> None:
    for url, payload in session.info.pop(_PENDING_KEY, []):
        dispatcher.enqueue(url, payload)


@event.listens_for(Session, "after_rollback")
def _discard_pending(session: Session) -> None:
    dropped = session.info.pop(_PENDING_KEY, [])
    if dropped:
        logger.info("Discarded %d webhook events after rollback", len(dropped))


def submit_ride_request(session: AsyncSession, ride: RideModel) -> bool:
    if not settings.ride_request_webhook_url:
        return False
    return _defer(session, settings.ride_request_webhook_url, ride_request_payload(ride))


def submit_driver_registration(session: AsyncSession, driver: DriverModel) -> bool:
    if not settings.driver_registration_webhook_url:
        return False
    return _defer(
        session,
        settings.driver_registration_webhook_url,
        driver_registration_payload(driver),
    )
