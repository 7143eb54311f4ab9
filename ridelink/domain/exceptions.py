"""Exception hierarchy for ride workflows.

Every error carries the HTTP status the API layer answers with, so the
single exception handler in ``ridelink.api.app`` stays a lookup.
"""


class RideLinkError(Exception):
    """Base class for all workflow errors."""

    status_code = 400


class InvalidRequestError(RideLinkError):
    """Raised when required input is missing or malformed."""

    status_code = 422


# ── 404 ───────────────────────────────────────────────────────────────


class NotFoundError(RideLinkError):
    status_code = 404


class RideNotFoundError(NotFoundError):
    pass


class DriverNotFoundError(NotFoundError):
    pass


class RiderNotFoundError(NotFoundError):
    pass


class TransferNotFoundError(NotFoundError):
    pass


class ConnectionNotFoundError(NotFoundError):
    pass


class MessageNotFoundError(NotFoundError):
    pass


class NotificationNotFoundError(NotFoundError):
    pass


class ScheduledRideNotFoundError(NotFoundError):
    pass


class SavedRiderNotFoundError(NotFoundError):
    pass


# ── 401 / 403 ─────────────────────────────────────────────────────────


class AuthenticationError(RideLinkError):
    """Raised when a route needs a principal and none was supplied."""

    status_code = 401


class AuthorizationError(RideLinkError):
    """Raised when the principal may not act on the target record."""

    status_code = 403


class NotAssignedDriverError(AuthorizationError):
    """Raised when a driver acts on a ride that is not assigned to them."""


# ── 409 ───────────────────────────────────────────────────────────────


class ConflictError(RideLinkError):
    status_code = 409


class InvalidStateTransition(ConflictError):
    """Raised when a status change violates its state machine."""


class DriverNotAvailableError(ConflictError):
    """Raised when a driver is not available and active."""


class DriverAlreadyRegisteredError(ConflictError):
    pass


class RiderAlreadyRegisteredError(ConflictError):
    pass


class DuplicateConnectionError(ConflictError):
    pass


class ConcurrentModificationError(ConflictError):
    """Raised when a write loses the race against another writer."""


class ResourceLockedError(ConflictError):
    """Raised when the per-record distributed lock is held elsewhere."""
