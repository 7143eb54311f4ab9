"""Pydantic request / response schemas for the REST API.

JSON keys use the field names of the original document store
(``driverId``, ``isActive``, ``availableDrivers`` ...); requests also
accept the snake_case spelling.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ridelink.domain.enums import (
    ApprovalStatus,
    ConnectionStatus,
    NotificationType,
    RideStatus,
    ScheduledRideStatus,
    SenderType,
    TransferStatus,
)


class APIModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Shared fragments ──────────────────────────────────────────────────


class Vehicle(APIModel):
    make: str
    model: str
    year: int = Field(..., ge=1950, le=2100)
    color: str
    plate: str


class DriversLicense(APIModel):
    number: str
    expiration_date: str
    state: Optional[str] = None


class DriverCardResponse(APIModel):
    id: str
    name: str
    photo: str = ""
    rating: float


def _nested(model: Optional[APIModel]) -> Optional[dict[str, Any]]:
    return model.model_dump(by_alias=True) if model is not None else None


# ── Requests ──────────────────────────────────────────────────────────


class RideCreateRequest(APIModel):
    name: str = Field(..., min_length=1, max_length=120)
    phone: str = Field(..., min_length=1, max_length=32)
    pickup: Optional[str] = Field(None, max_length=255)
    dropoff: Optional[str] = Field(None, max_length=255)
    location_id: str
    selected_driver_id: Optional[str] = Field(
        None, description="Driver picked from the availability listing."
    )


class AssignDriverRequest(APIModel):
    driver_id: str


class RideTransferRequest(APIModel):
    from_driver_id: str
    to_driver_id: str
    transfer_fee_amount: Optional[float] = Field(None, ge=0)


class RideStatusUpdate(APIModel):
    status: RideStatus


class TransferCreateRequest(APIModel):
    ride_id: str
    new_driver_id: str
    transfer_fee_amount: float = Field(0.0, ge=0)


class DriverRegistrationRequest(APIModel):
    name: str = Field(..., min_length=2, max_length=120)
    email: str = Field(..., max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    photo_url: Optional[str] = Field(None, max_length=512)
    location_id: str
    vehicle: Optional[Vehicle] = None
    drivers_license: Optional[DriversLicense] = None

    def profile(self) -> dict[str, Any]:
        data = self.model_dump(exclude={"vehicle", "drivers_license"})
        data["vehicle"] = _nested(self.vehicle)
        data["drivers_license"] = _nested(self.drivers_license)
        return data


class DriverUpdateRequest(APIModel):
    name: Optional[str] = Field(None, min_length=2, max_length=120)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    photo_url: Optional[str] = Field(None, max_length=512)
    location_id: Optional[str] = None
    vehicle: Optional[Vehicle] = None
    drivers_license: Optional[DriversLicense] = None

    def changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        nested = {"vehicle", "drivers_license"}
        data = self.model_dump(exclude_unset=True, exclude=nested)
        for name in nested & self.model_fields_set:
            data[name] = _nested(getattr(self, name))
        return data


class AvailabilityUpdate(APIModel):
    available: bool


class DriverReviewRequest(APIModel):
    decision: ApprovalStatus


class RiderRegistrationRequest(APIModel):
    name: str = Field(..., min_length=2, max_length=120)
    phone: str = Field(..., min_length=1, max_length=32)
    email: Optional[str] = Field(None, max_length=255)
    photo_url: Optional[str] = Field(None, max_length=512)


class SavedRiderCreateRequest(APIModel):
    name: str = Field(..., min_length=1, max_length=120)
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None


class ConnectionCreateRequest(APIModel):
    driver_id: str
    rider_id: str


class ConnectionStatusUpdate(APIModel):
    status: ConnectionStatus


class ConversationRef(APIModel):
    ride_id: Optional[str] = None
    driver_id: Optional[str] = None
    rider_id: Optional[str] = None

    def target(self) -> dict[str, Optional[str]]:
        return {"ride_id": self.ride_id, "driver_id": self.driver_id, "rider_id": self.rider_id}


class MessageCreateRequest(ConversationRef):
    content: str = Field(..., min_length=1, max_length=2000)


class ScheduleCreateRequest(APIModel):
    date: dt.date
    time: dt.time
    pickup: str = Field(..., min_length=1, max_length=255)
    dropoff: str = Field(..., min_length=1, max_length=255)
    notes: Optional[str] = None
    saved_rider_id: Optional[str] = None
    driver_id: Optional[str] = None


class ScheduleStatusUpdate(APIModel):
    status: ScheduledRideStatus


# ── Responses ─────────────────────────────────────────────────────────


class LocationResponse(APIModel):
    id: str
    name: str
    region: str
    description: str


class DriverResponse(APIModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    location_id: str
    vehicle: Optional[dict[str, Any]] = None
    rating: Optional[float] = None
    available: bool
    is_active: bool
    approval_status: ApprovalStatus
    total_rides: int = 0
    completed_rides: int = 0
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class RiderResponse(APIModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class SavedRiderResponse(APIModel):
    id: str
    driver_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class RideResponse(APIModel):
    id: str
    rider_id: Optional[str] = None
    customer_name: str
    phone: str
    pickup: str
    dropoff: str
    location_id: str
    status: RideStatus
    driver_id: Optional[str] = None
    previous_driver_id: Optional[str] = None
    assigned_driver: Optional[dict[str, Any]] = None
    available_drivers: list[DriverCardResponse] = []
    transfer_fee_amount: Optional[float] = None
    scheduled_time: Optional[dt.datetime] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    transferred_at: Optional[dt.datetime] = None
    completed_at: Optional[dt.datetime] = None
    version: int


class TransferResponse(APIModel):
    id: str
    ride_id: str
    original_driver_id: str
    new_driver_id: str
    transfer_fee_amount: float
    status: TransferStatus
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class ConnectionResponse(APIModel):
    id: str
    driver_id: str
    rider_id: str
    requested_by: str
    status: ConnectionStatus
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class MessageResponse(APIModel):
    id: str
    conversation_id: str
    ride_id: Optional[str] = None
    sender_id: str
    sender_type: SenderType
    receiver_id: Optional[str] = None
    content: str
    read: bool
    timestamp: Optional[dt.datetime] = None


class NotificationResponse(APIModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    read: bool
    created_at: Optional[dt.datetime] = None


class ScheduledRideResponse(APIModel):
    id: str
    driver_id: str
    rider_id: Optional[str] = None
    rider_name: str
    date: dt.date
    time: dt.time
    pickup: str
    dropoff: str
    notes: Optional[str] = None
    status: ScheduledRideStatus
    created_at: Optional[dt.datetime] = None


class ReadCountResponse(APIModel):
    updated: int


class HealthResponse(APIModel):
    status: str = "ok"


class ErrorResponse(APIModel):
    detail: str
