"""
Notification emitter.

Notifications are plain rows added to the caller's session, so they land
in the same commit as the state change that triggered them.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ridelink.domain.entities import Principal
from ridelink.domain.enums import NotificationType
from ridelink.domain.exceptions import NotificationNotFoundError
from ridelink.infrastructure.models import NotificationModel
from ridelink.infrastructure.repositories import NotificationRepository
from .base import flush, require_user

logger = logging.getLogger(__name__)


def notify(
    session: AsyncSession,
    *,
    user_id: Optional[str],
    type: NotificationType,
    title: str,
    message: str,
) -> Optional[NotificationModel]:
    if not user_id:
        return None
    notification = NotificationModel(
        user_id=user_id, type=type, title=title, message=message, read=False
    )
    NotificationRepository(session).add(notification)
    logger.debug("Queued %s notification for %s", type.value, user_id)
    return notification


async def list_notifications(
    session: AsyncSession, principal: Principal, unread_only: bool = False
) -> list[NotificationModel]:
    return await NotificationRepository(session).get_for_user(
        principal.user_id, unread_only=unread_only
    )


async def mark_notification_read(
    session: AsyncSession, principal: Principal, notification_id: str
) -> NotificationModel:
    notification = await NotificationRepository(session).get_by_id(notification_id)
    if notification is None:
        raise NotificationNotFoundError("Notification not found")
    require_user(principal, notification.user_id, allow_admin=False)
    notification.read = True
    await flush(session)
    return notification
