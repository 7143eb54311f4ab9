"""Driver/rider connections, messaging and notifications."""

from __future__ import annotations

import pytest

from ridelink.domain.enums import ConnectionStatus, NotificationType, RideStatus, SenderType
from ridelink.domain.exceptions import (
    AuthorizationError,
    DuplicateConnectionError,
    InvalidRequestError,
    InvalidStateTransition,
    RiderNotFoundError,
)
from ridelink.services import connections, messaging, notifications
from tests.conftest import make_driver, make_ride, make_rider, principal


@pytest.fixture
def driver():
    return principal("d1")


@pytest.fixture
def rider():
    return principal("r1")


async def _people(session):
    await make_driver(session, "d1")
    await make_rider(session, "r1")


async def _connected(session, driver, rider):
    await _people(session)
    connection = await connections.request_connection(session, rider, "d1", "r1")
    return await connections.update_connection_status(
        session, driver, connection.id, ConnectionStatus.ACCEPTED
    )


class TestConnections:
    @pytest.mark.asyncio
    async def test_request_notifies_other_side(self, db_session, rider):
        await _people(db_session)

        connection = await connections.request_connection(db_session, rider, "d1", "r1")

        assert connection.status is ConnectionStatus.PENDING
        assert connection.requested_by == "r1"
        [note] = await notifications.list_notifications(db_session, principal("d1"))
        assert note.type is NotificationType.CONNECTION_REQUEST

    @pytest.mark.asyncio
    async def test_cannot_request_for_others(self, db_session):
        await _people(db_session)
        with pytest.raises(AuthorizationError):
            await connections.request_connection(db_session, principal("x"), "d1", "r1")

    @pytest.mark.asyncio
    async def test_unknown_rider(self, db_session, driver):
        await make_driver(db_session, "d1")
        with pytest.raises(RiderNotFoundError):
            await connections.request_connection(db_session, driver, "d1", "nobody")

    @pytest.mark.asyncio
    async def test_duplicate_pair_rejected(self, db_session, driver, rider):
        await _people(db_session)
        await connections.request_connection(db_session, rider, "d1", "r1")

        with pytest.raises(DuplicateConnectionError):
            await connections.request_connection(db_session, driver, "d1", "r1")

    @pytest.mark.asyncio
    async def test_requester_cannot_accept_own_request(self, db_session, rider):
        await _people(db_session)
        connection = await connections.request_connection(db_session, rider, "d1", "r1")

        with pytest.raises(AuthorizationError):
            await connections.update_connection_status(
                db_session, rider, connection.id, ConnectionStatus.ACCEPTED
            )

    @pytest.mark.asyncio
    async def test_accept_notifies_requester(self, db_session, driver, rider):
        connection = await _connected(db_session, driver, rider)

        assert connection.status is ConnectionStatus.ACCEPTED
        assert await connections.are_connected(db_session, "d1", "r1")
        [note] = await notifications.list_notifications(db_session, rider)
        assert note.type is NotificationType.CONNECTION_ACCEPTED

    @pytest.mark.asyncio
    async def test_answer_is_final(self, db_session, driver, rider):
        connection = await _connected(db_session, driver, rider)

        with pytest.raises(InvalidStateTransition):
            await connections.update_connection_status(
                db_session, driver, connection.id, ConnectionStatus.REJECTED
            )

    @pytest.mark.asyncio
    async def test_remove(self, db_session, driver, rider):
        connection = await _connected(db_session, driver, rider)

        await connections.remove_connection(db_session, rider, connection.id)

        assert await connections.list_connections(db_session, driver) == []
        assert not await connections.are_connected(db_session, "d1", "r1")


class TestMessaging:
    @pytest.mark.asyncio
    async def test_pair_chat_requires_accepted_connection(self, db_session, driver, rider):
        await _people(db_session)
        await connections.request_connection(db_session, rider, "d1", "r1")

        with pytest.raises(AuthorizationError):
            await messaging.send_message(
                db_session, rider, "hello", driver_id="d1", rider_id="r1"
            )

    @pytest.mark.asyncio
    async def test_pair_chat_round_trip(self, db_session, driver, rider):
        await _connected(db_session, driver, rider)

        sent = await messaging.send_message(
            db_session, rider, "  Can you pick me up at 6?  ", driver_id="d1", rider_id="r1"
        )
        await messaging.send_message(db_session, driver, "Sure", driver_id="d1", rider_id="r1")

        assert sent.conversation_id == "pair:d1:r1"
        assert sent.sender_type is SenderType.RIDER
        assert sent.receiver_id == "d1"
        assert sent.content == "Can you pick me up at 6?"

        listed = await messaging.list_messages(db_session, driver, driver_id="d1", rider_id="r1")
        assert [m.content for m in listed] == ["Can you pick me up at 6?", "Sure"]

    @pytest.mark.asyncio
    async def test_ride_chat_limited_to_participants(self, db_session, driver):
        ride = await make_ride(db_session, rider_id="r1", driver_id="d1", status=RideStatus.ASSIGNED)

        message = await messaging.send_message(db_session, driver, "On my way", ride_id=ride.id)

        assert message.conversation_id == f"ride:{ride.id}"
        assert message.ride_id == ride.id
        assert message.receiver_id == "r1"
        with pytest.raises(AuthorizationError):
            await messaging.list_messages(db_session, principal("d9"), ride_id=ride.id)

    @pytest.mark.asyncio
    async def test_conversation_must_be_addressed(self, db_session, driver):
        with pytest.raises(InvalidRequestError):
            await messaging.send_message(db_session, driver, "hi")

    @pytest.mark.asyncio
    async def test_blank_message_rejected(self, db_session, driver):
        with pytest.raises(InvalidRequestError):
            await messaging.send_message(db_session, driver, "   ", ride_id="r")

    @pytest.mark.asyncio
    async def test_receiver_marks_read(self, session_factory, driver, rider):
        async with session_factory() as session:
            await _connected(session, driver, rider)
            first = await messaging.send_message(
                session, rider, "one", driver_id="d1", rider_id="r1"
            )
            await messaging.send_message(session, rider, "two", driver_id="d1", rider_id="r1")
            await session.commit()

        async with session_factory() as session:
            with pytest.raises(AuthorizationError):
                await messaging.mark_message_read(session, rider, first.id)
            message = await messaging.mark_message_read(session, driver, first.id)
            assert message.read is True
            updated = await messaging.mark_conversation_read(
                session, driver, driver_id="d1", rider_id="r1"
            )
            assert updated == 1
            await session.commit()

    @pytest.mark.asyncio
    async def test_message_notification_preview(self, db_session, driver, rider):
        await _connected(db_session, driver, rider)

        await messaging.send_message(
            db_session, driver, "x" * 200, driver_id="d1", rider_id="r1"
        )

        notes = await notifications.list_notifications(db_session, rider, unread_only=True)
        message_note = next(n for n in notes if n.type is NotificationType.MESSAGE)
        assert len(message_note.message) == messaging.PREVIEW_LENGTH


class TestNotifications:
    @pytest.mark.asyncio
    async def test_only_owner_marks_read(self, db_session, driver, rider):
        await _people(db_session)
        await connections.request_connection(db_session, rider, "d1", "r1")
        [note] = await notifications.list_notifications(db_session, driver)

        with pytest.raises(AuthorizationError):
            await notifications.mark_notification_read(db_session, rider, note.id)

        note = await notifications.mark_notification_read(db_session, driver, note.id)
        assert note.read is True
        assert await notifications.list_notifications(db_session, driver, unread_only=True) == []
