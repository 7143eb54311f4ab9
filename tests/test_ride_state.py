"""Unit tests for the lifecycle state machines (State Pattern)."""

import pytest

from ridelink.domain.entities import (
    CONNECTION_LIFECYCLE,
    RIDE_LIFECYCLE,
    SCHEDULED_RIDE_LIFECYCLE,
    TRANSFER_LIFECYCLE,
)
from ridelink.domain.enums import (
    ConnectionStatus,
    RideStatus,
    ScheduledRideStatus,
    TransferStatus,
)
from ridelink.domain.exceptions import ConflictError, InvalidStateTransition


class TestRideStateMachine:
    # ── Valid transitions ─────────────────────────────────────────

    def test_pending_to_assigned(self):
        RIDE_LIFECYCLE.check(RideStatus.PENDING, RideStatus.ASSIGNED)

    def test_pending_to_cancelled(self):
        RIDE_LIFECYCLE.check(RideStatus.PENDING, RideStatus.CANCELLED)

    def test_assigned_to_completed(self):
        RIDE_LIFECYCLE.check(RideStatus.ASSIGNED, RideStatus.COMPLETED)

    def test_assigned_to_transferred(self):
        RIDE_LIFECYCLE.check(RideStatus.ASSIGNED, RideStatus.TRANSFERRED)

    def test_transferred_to_assigned(self):
        RIDE_LIFECYCLE.check(RideStatus.TRANSFERRED, RideStatus.ASSIGNED)

    # ── Invalid transitions ───────────────────────────────────────

    def test_transferred_cannot_complete(self):
        with pytest.raises(InvalidStateTransition):
            RIDE_LIFECYCLE.check(RideStatus.TRANSFERRED, RideStatus.COMPLETED)

    def test_pending_cannot_complete(self):
        with pytest.raises(InvalidStateTransition):
            RIDE_LIFECYCLE.check(RideStatus.PENDING, RideStatus.COMPLETED)

    def test_completed_is_terminal(self):
        assert RIDE_LIFECYCLE.is_terminal(RideStatus.COMPLETED)
        with pytest.raises(InvalidStateTransition):
            RIDE_LIFECYCLE.check(RideStatus.COMPLETED, RideStatus.CANCELLED)

    def test_cancelled_is_terminal(self):
        assert RIDE_LIFECYCLE.is_terminal(RideStatus.CANCELLED)
        assert not RIDE_LIFECYCLE.can_transition(RideStatus.CANCELLED, RideStatus.PENDING)

    def test_error_message_names_both_states(self):
        with pytest.raises(InvalidStateTransition, match="from completed to assigned"):
            RIDE_LIFECYCLE.check(RideStatus.COMPLETED, RideStatus.ASSIGNED)

    def test_invalid_transition_is_a_conflict(self):
        assert issubclass(InvalidStateTransition, ConflictError)
        assert InvalidStateTransition.status_code == 409


class TestTransferStateMachine:
    def test_pending_can_be_answered(self):
        assert TRANSFER_LIFECYCLE.can_transition(TransferStatus.PENDING, TransferStatus.ACCEPTED)
        assert TRANSFER_LIFECYCLE.can_transition(TransferStatus.PENDING, TransferStatus.REJECTED)

    def test_answer_is_final(self):
        with pytest.raises(InvalidStateTransition):
            TRANSFER_LIFECYCLE.check(TransferStatus.ACCEPTED, TransferStatus.REJECTED)


class TestConnectionStateMachine:
    def test_accepted_cannot_be_rejected(self):
        with pytest.raises(InvalidStateTransition):
            CONNECTION_LIFECYCLE.check(ConnectionStatus.ACCEPTED, ConnectionStatus.REJECTED)

    def test_pending_to_accepted(self):
        CONNECTION_LIFECYCLE.check(ConnectionStatus.PENDING, ConnectionStatus.ACCEPTED)


class TestScheduledRideStateMachine:
    def test_confirmed_can_complete(self):
        SCHEDULED_RIDE_LIFECYCLE.check(
            ScheduledRideStatus.CONFIRMED, ScheduledRideStatus.COMPLETED
        )

    def test_pending_cannot_complete(self):
        with pytest.raises(InvalidStateTransition):
            SCHEDULED_RIDE_LIFECYCLE.check(
                ScheduledRideStatus.PENDING, ScheduledRideStatus.COMPLETED
            )
