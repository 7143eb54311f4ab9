"""
SQLAlchemy ORM models.

Tables mirror the document-store collections the booking app used
(``drivers``, ``riders``, ``rides``, ``scheduledRides``, ``connections``,
``messages``, ``notifications``, ``rideTransfers``, ``savedRiders``).
Columns are snake_case; the API schemas restore the stored field names.

``rides`` and ``ride_transfers`` carry a ``version`` column wired as the
mapper's ``version_id_col``: an UPDATE against a row someone else has
already changed matches zero rows and SQLAlchemy raises ``StaleDataError``.

Timestamps are filled client-side so they are readable right after a
flush without a refresh round-trip.
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
)

from .database import Base
from ridelink.domain.entities import utcnow
from ridelink.domain.enums import (
    ApprovalStatus,
    ConnectionStatus,
    NotificationType,
    RideStatus,
    ScheduledRideStatus,
    SenderType,
    TransferStatus,
)


def _new_id() -> str:
    return uuid.uuid4().hex


def _enum(enum_cls, name: str) -> Enum:
    # Persist the lowercase values, not the member names.
    return Enum(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
    )


class DriverModel(Base):
    __tablename__ = "drivers"

    id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    photo_url = Column(String(512), nullable=True)
    location_id = Column(String(64), nullable=False)
    vehicle = Column(JSON, nullable=True)
    drivers_license = Column(JSON, nullable=True)
    rating = Column(Float, nullable=True)
    available = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    approval_status = Column(
        _enum(ApprovalStatus, "approval_status"),
        nullable=False,
        default=ApprovalStatus.PENDING,
    )
    total_rides = Column(Integer, nullable=False, default=0)
    completed_rides = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_drivers_availability", "location_id", "available", "is_active"),
        Index("idx_drivers_approval", "approval_status"),
    )


class RiderModel(Base):
    __tablename__ = "riders"

    id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=False)
    photo_url = Column(String(512), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class SavedRiderModel(Base):
    __tablename__ = "saved_riders"

    id = Column(String(64), primary_key=True, default=_new_id)
    driver_id = Column(String(64), ForeignKey("drivers.id"), nullable=False)
    name = Column(String(120), nullable=False)
    phone = Column(String(32), nullable=True)
    email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_saved_riders_driver", "driver_id"),)


class RideModel(Base):
    __tablename__ = "rides"

    id = Column(String(64), primary_key=True, default=_new_id)
    rider_id = Column(String(64), nullable=True)
    customer_name = Column(String(120), nullable=False)
    phone = Column(String(32), nullable=False)
    pickup = Column(String(255), nullable=False, default="")
    dropoff = Column(String(255), nullable=False, default="")
    location_id = Column(String(64), nullable=False)

    status = Column(
        _enum(RideStatus, "ride_status"), nullable=False, default=RideStatus.PENDING
    )
    driver_id = Column(String(64), ForeignKey("drivers.id"), nullable=True)
    previous_driver_id = Column(String(64), ForeignKey("drivers.id"), nullable=True)

    # Point-in-time driver summaries; never refreshed after the write.
    assigned_driver = Column(JSON, nullable=True)
    available_drivers = Column(JSON, nullable=False, default=list)

    transfer_fee_amount = Column(Float, nullable=True)
    scheduled_time = Column(DateTime(timezone=True), default=utcnow)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    transferred_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_rides_status_location", "status", "location_id"),
        Index("idx_rides_driver", "driver_id"),
        Index("idx_rides_rider", "rider_id"),
    )


class RideTransferModel(Base):
    __tablename__ = "ride_transfers"

    id = Column(String(64), primary_key=True, default=_new_id)
    ride_id = Column(String(64), ForeignKey("rides.id"), nullable=False)
    original_driver_id = Column(String(64), ForeignKey("drivers.id"), nullable=False)
    new_driver_id = Column(String(64), ForeignKey("drivers.id"), nullable=False)
    transfer_fee_amount = Column(Float, nullable=False, default=0.0)
    status = Column(
        _enum(TransferStatus, "transfer_status"),
        nullable=False,
        default=TransferStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_transfers_new_driver", "new_driver_id", "status"),
        Index("idx_transfers_original_driver", "original_driver_id"),
        Index("idx_transfers_ride", "ride_id"),
    )


class ConnectionModel(Base):
    __tablename__ = "connections"

    id = Column(String(64), primary_key=True, default=_new_id)
    driver_id = Column(String(64), nullable=False)
    rider_id = Column(String(64), nullable=False)
    requested_by = Column(String(64), nullable=False)
    status = Column(
        _enum(ConnectionStatus, "connection_status"),
        nullable=False,
        default=ConnectionStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("driver_id", "rider_id", name="uq_connections_pair"),
        Index("idx_connections_rider", "rider_id"),
    )


class MessageModel(Base):
    __tablename__ = "messages"

    id = Column(String(64), primary_key=True, default=_new_id)
    conversation_id = Column(String(160), nullable=False)
    ride_id = Column(String(64), ForeignKey("rides.id"), nullable=True)
    sender_id = Column(String(64), nullable=False)
    sender_type = Column(_enum(SenderType, "sender_type"), nullable=False)
    receiver_id = Column(String(64), nullable=True)
    content = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (
        Index("idx_messages_conversation", "conversation_id", "timestamp"),
        Index("idx_messages_receiver_unread", "receiver_id", "read"),
    )


class NotificationModel(Base):
    __tablename__ = "notifications"

    id = Column(String(64), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False)
    type = Column(_enum(NotificationType, "notification_type"), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    __table_args__ = (Index("idx_notifications_user", "user_id", "read"),)


class ScheduledRideModel(Base):
    __tablename__ = "scheduled_rides"

    id = Column(String(64), primary_key=True, default=_new_id)
    driver_id = Column(String(64), ForeignKey("drivers.id"), nullable=False)
    rider_id = Column(String(64), nullable=True)
    rider_name = Column(String(120), nullable=False)
    date = Column(Date, nullable=False)
    time = Column(Time, nullable=False)
    pickup = Column(String(255), nullable=False)
    dropoff = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    status = Column(
        _enum(ScheduledRideStatus, "scheduled_ride_status"),
        nullable=False,
        default=ScheduledRideStatus.PENDING,
    )
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_scheduled_rides_driver", "driver_id", "date"),
        Index("idx_scheduled_rides_rider", "rider_id", "date"),
    )
