"""
Repository Pattern -- abstracts DB access so workflow logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work) and exposes
domain-relevant queries only.  Nothing here commits; the caller owns the
transaction.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import (
    ConnectionModel,
    DriverModel,
    MessageModel,
    NotificationModel,
    RideModel,
    RideTransferModel,
    RiderModel,
    SavedRiderModel,
    ScheduledRideModel,
)
from ridelink.domain.enums import ApprovalStatus, RideStatus, TransferStatus


class DriverRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, driver: DriverModel) -> DriverModel:
        self.session.add(driver)
        await self.session.flush()
        return driver

    async def get_by_id(self, driver_id: str) -> Optional[DriverModel]:
        return await self.session.get(DriverModel, driver_id)

    async def get_available(self, location_id: str | None = None) -> list[DriverModel]:
        """Available *and* active drivers, in store order."""
        query = select(DriverModel).where(
            DriverModel.available.is_(True),
            DriverModel.is_active.is_(True),
        )
        if location_id is not None:
            query = query.where(DriverModel.location_id == location_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_pending_approval(self) -> list[DriverModel]:
        result = await self.session.execute(
            select(DriverModel)
            .where(DriverModel.approval_status == ApprovalStatus.PENDING)
            .order_by(DriverModel.created_at)
        )
        return list(result.scalars().all())

    async def increment_ride_counters(self, driver_id: str) -> int:
        """Bump ``total_rides`` and ``completed_rides`` in one statement."""
        result = await self.session.execute(
            update(DriverModel)
            .where(DriverModel.id == driver_id)
            .values(
                total_rides=DriverModel.total_rides + 1,
                completed_rides=DriverModel.completed_rides + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


class RiderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, rider: RiderModel) -> RiderModel:
        self.session.add(rider)
        await self.session.flush()
        return rider

    async def get_by_id(self, rider_id: str) -> Optional[RiderModel]:
        return await self.session.get(RiderModel, rider_id)


class SavedRiderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, saved: SavedRiderModel) -> SavedRiderModel:
        self.session.add(saved)
        await self.session.flush()
        return saved

    async def get_by_id(self, saved_id: str) -> Optional[SavedRiderModel]:
        return await self.session.get(SavedRiderModel, saved_id)

    async def get_for_driver(self, driver_id: str) -> list[SavedRiderModel]:
        result = await self.session.execute(
            select(SavedRiderModel)
            .where(SavedRiderModel.driver_id == driver_id)
            .order_by(SavedRiderModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete(self, saved: SavedRiderModel) -> None:
        await self.session.delete(saved)
        await self.session.flush()


class RideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, ride: RideModel) -> RideModel:
        self.session.add(ride)
        await self.session.flush()
        return ride

    async def get_by_id(self, ride_id: str) -> Optional[RideModel]:
        return await self.session.get(RideModel, ride_id)

    async def get_for_driver(self, driver_id: str) -> list[RideModel]:
        result = await self.session.execute(
            select(RideModel)
            .where(RideModel.driver_id == driver_id)
            .order_by(RideModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_open_rides(self, location_id: str | None = None) -> list[RideModel]:
        query = (
            select(RideModel)
            .where(RideModel.status == RideStatus.PENDING)
            .order_by(RideModel.created_at)
        )
        if location_id is not None:
            query = query.where(RideModel.location_id == location_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())


class RideTransferRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, transfer: RideTransferModel) -> RideTransferModel:
        self.session.add(transfer)
        await self.session.flush()
        return transfer

    async def get_by_id(self, transfer_id: str) -> Optional[RideTransferModel]:
        return await self.session.get(RideTransferModel, transfer_id)

    async def get_incoming(self, driver_id: str) -> list[RideTransferModel]:
        result = await self.session.execute(
            select(RideTransferModel)
            .where(
                RideTransferModel.new_driver_id == driver_id,
                RideTransferModel.status == TransferStatus.PENDING,
            )
            .order_by(RideTransferModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_history(self, driver_id: str) -> list[RideTransferModel]:
        result = await self.session.execute(
            select(RideTransferModel)
            .where(
                or_(
                    RideTransferModel.original_driver_id == driver_id,
                    RideTransferModel.new_driver_id == driver_id,
                )
            )
            .order_by(RideTransferModel.created_at.desc())
        )
        return list(result.scalars().all())


class ConnectionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, connection: ConnectionModel) -> ConnectionModel:
        self.session.add(connection)
        await self.session.flush()
        return connection

    async def get_by_id(self, connection_id: str) -> Optional[ConnectionModel]:
        return await self.session.get(ConnectionModel, connection_id)

    async def get_pair(self, driver_id: str, rider_id: str) -> Optional[ConnectionModel]:
        result = await self.session.execute(
            select(ConnectionModel).where(
                ConnectionModel.driver_id == driver_id,
                ConnectionModel.rider_id == rider_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_for_user(self, user_id: str) -> list[ConnectionModel]:
        result = await self.session.execute(
            select(ConnectionModel)
            .where(
                or_(
                    ConnectionModel.driver_id == user_id,
                    ConnectionModel.rider_id == user_id,
                )
            )
            .order_by(ConnectionModel.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete(self, connection: ConnectionModel) -> None:
        await self.session.delete(connection)
        await self.session.flush()


class MessageRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, message: MessageModel) -> MessageModel:
        self.session.add(message)
        await self.session.flush()
        return message

    async def get_by_id(self, message_id: str) -> Optional[MessageModel]:
        return await self.session.get(MessageModel, message_id)

    async def get_conversation(self, conversation_id: str) -> list[MessageModel]:
        result = await self.session.execute(
            select(MessageModel)
            .where(MessageModel.conversation_id == conversation_id)
            .order_by(MessageModel.timestamp)
        )
        return list(result.scalars().all())

    async def mark_conversation_read(self, conversation_id: str, receiver_id: str) -> int:
        result = await self.session.execute(
            update(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.receiver_id == receiver_id,
                MessageModel.read.is_(False),
            )
            .values(read=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount


class NotificationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    def add(self, notification: NotificationModel) -> None:
        self.session.add(notification)

    async def get_by_id(self, notification_id: str) -> Optional[NotificationModel]:
        return await self.session.get(NotificationModel, notification_id)

    async def get_for_user(
        self, user_id: str, unread_only: bool = False
    ) -> list[NotificationModel]:
        query = (
            select(NotificationModel)
            .where(NotificationModel.user_id == user_id)
            .order_by(NotificationModel.created_at.desc())
        )
        if unread_only:
            query = query.where(NotificationModel.read.is_(False))
        result = await self.session.execute(query)
        return list(result.scalars().all())


class ScheduledRideRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, ride: ScheduledRideModel) -> ScheduledRideModel:
        self.session.add(ride)
        await self.session.flush()
        return ride

    async def get_by_id(self, ride_id: str) -> Optional[ScheduledRideModel]:
        return await self.session.get(ScheduledRideModel, ride_id)

    async def get_for_user(self, user_id: str) -> list[ScheduledRideModel]:
        result = await self.session.execute(
            select(ScheduledRideModel)
            .where(
                or_(
                    ScheduledRideModel.driver_id == user_id,
                    ScheduledRideModel.rider_id == user_id,
                )
            )
            .order_by(ScheduledRideModel.date, ScheduledRideModel.time)
        )
        return list(result.scalars().all())
