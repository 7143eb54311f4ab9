"""
Messaging channel.

A conversation is keyed either by a ride (``ride:<ride_id>``, open to the
ride's rider and driver) or by a driver/rider pair
(``pair:<driver_id>:<rider_id>``, open once their connection is
accepted).  Messages are listed oldest first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.domain.entities import Principal
from ridelink.domain.enums import NotificationType, SenderType
from ridelink.domain.exceptions import (
    AuthorizationError,
    InvalidRequestError,
    MessageNotFoundError,
)
from ridelink.infrastructure.models import MessageModel
from ridelink.infrastructure.repositories import MessageRepository
from .base import flush, required_text
from .connections import are_connected
from .notifications import notify
from .rides import get_ride

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 80


@dataclass(frozen=True)
class Conversation:
    id: str
    driver_id: Optional[str]
    rider_id: Optional[str]
    ride_id: Optional[str] = None

    def sender_type(self, user_id: str) -> SenderType:
        return SenderType.DRIVER if user_id == self.driver_id else SenderType.RIDER

    def other_party(self, user_id: str) -> Optional[str]:
        return self.rider_id if user_id == self.driver_id else self.driver_id


async def resolve_conversation(
    session: AsyncSession,
    principal: Principal,
    *,
    ride_id: Optional[str] = None,
    driver_id: Optional[str] = None,
    rider_id: Optional[str] = None,
) -> Conversation:
    if ride_id:
        ride = await get_ride(session, ride_id)
        if not principal.is_any(ride.rider_id, ride.driver_id):
            raise AuthorizationError("Only the ride's rider and driver can use its chat")
        return Conversation(f"ride:{ride.id}", ride.driver_id, ride.rider_id, ride.id)

    if driver_id and rider_id:
        if not principal.is_any(driver_id, rider_id):
            raise AuthorizationError("You are not part of this conversation")
        if not await are_connected(session, driver_id, rider_id):
            raise AuthorizationError("Messaging requires an accepted connection")
        return Conversation(f"pair:{driver_id}:{rider_id}", driver_id, rider_id)

    raise InvalidRequestError("Provide a ride id or a driver/rider pair")


async def send_message(
    session: AsyncSession,
    principal: Principal,
    content: str,
    **target: Optional[str],
) -> MessageModel:
    content = required_text(content, "Message")
    conversation = await resolve_conversation(session, principal, **target)
    receiver_id = conversation.other_party(principal.user_id)

    message = await MessageRepository(session).create(
        MessageModel(
            conversation_id=conversation.id,
            ride_id=conversation.ride_id,
            sender_id=principal.user_id,
            sender_type=conversation.sender_type(principal.user_id),
            receiver_id=receiver_id,
            content=content,
            read=False,
        )
    )
    notify(
        session,
        user_id=receiver_id,
        type=NotificationType.MESSAGE,
        title="New message",
        message=content[:PREVIEW_LENGTH],
    )
    logger.debug("Message %s posted to %s", message.id, conversation.id)
    return message


async def list_messages(
    session: AsyncSession, principal: Principal, **target: Optional[str]
) -> list[MessageModel]:
    conversation = await resolve_conversation(session, principal, **target)
    return await MessageRepository(session).get_conversation(conversation.id)


async def mark_message_read(
    session: AsyncSession, principal: Principal, message_id: str
) -> MessageModel:
    message = await MessageRepository(session).get_by_id(message_id)
    if message is None:
        raise MessageNotFoundError("Message not found")
    if principal.user_id != message.receiver_id:
        raise AuthorizationError("Only the receiver can mark a message read")
    message.read = True
    await flush(session)
    return message


async def mark_conversation_read(
    session: AsyncSession, principal: Principal, **target: Optional[str]
) -> int:
    conversation = await resolve_conversation(session, principal, **target)
    return await MessageRepository(session).mark_conversation_read(
        conversation.id, principal.user_id
    )
