"""Domain enumerations and state-transition rules.

Values are the lowercase strings used by the document store, so they
double as the wire format.
"""

import enum


class RideStatus(str, enum.Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    TRANSFERRED = "transferred"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.PENDING: {
        RideStatus.ASSIGNED,
        RideStatus.TRANSFERRED,
        RideStatus.CANCELLED,
    },
    RideStatus.ASSIGNED: {
        RideStatus.COMPLETED,
        RideStatus.CANCELLED,
        RideStatus.TRANSFERRED,
    },
    RideStatus.TRANSFERRED: {RideStatus.ASSIGNED},
    RideStatus.COMPLETED: set(),
    RideStatus.CANCELLED: set(),
}


class TransferStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


TRANSFER_TRANSITIONS: dict[TransferStatus, set[TransferStatus]] = {
    TransferStatus.PENDING: {TransferStatus.ACCEPTED, TransferStatus.REJECTED},
    TransferStatus.ACCEPTED: set(),
    TransferStatus.REJECTED: set(),
}


class ConnectionStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


CONNECTION_TRANSITIONS: dict[ConnectionStatus, set[ConnectionStatus]] = {
    ConnectionStatus.PENDING: {ConnectionStatus.ACCEPTED, ConnectionStatus.REJECTED},
    ConnectionStatus.ACCEPTED: set(),
    ConnectionStatus.REJECTED: set(),
}


class ScheduledRideStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


SCHEDULED_RIDE_TRANSITIONS: dict[ScheduledRideStatus, set[ScheduledRideStatus]] = {
    ScheduledRideStatus.PENDING: {
        ScheduledRideStatus.CONFIRMED,
        ScheduledRideStatus.CANCELLED,
    },
    ScheduledRideStatus.CONFIRMED: {
        ScheduledRideStatus.COMPLETED,
        ScheduledRideStatus.CANCELLED,
    },
    ScheduledRideStatus.COMPLETED: set(),
    ScheduledRideStatus.CANCELLED: set(),
}


class ApprovalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class SenderType(str, enum.Enum):
    DRIVER = "driver"
    RIDER = "rider"


class NotificationType(str, enum.Enum):
    MESSAGE = "message"
    RIDE_UPDATE = "ride_update"
    SYSTEM = "system"
    CONNECTION_REQUEST = "connection_request"
    CONNECTION_ACCEPTED = "connection_accepted"
    RIDE_REQUEST = "ride_request"
    RIDE_ACCEPTED = "ride_accepted"
    TRANSFER_REQUEST = "transfer_request"
    TRANSFER_UPDATE = "transfer_update"
