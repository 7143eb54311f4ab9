"""
Shared test fixtures.

Uses a throwaway SQLite file database (via aiosqlite) per test so tests
run without Docker / PostgreSQL / Redis.  The production models are
created as-is; Redis is replaced by ``FakeRedis``, which implements the
two commands the ride lock uses.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ridelink.domain.entities import ADMIN_CLAIM, Principal
from ridelink.domain.enums import ApprovalStatus, RideStatus
from ridelink.infrastructure.database import Base
from ridelink.infrastructure.models import DriverModel, RideModel, RiderModel


# ── Fakes ─────────────────────────────────────────────────────────────


class FakeRedis:
    """In-memory stand-in for the SET NX / EVAL pair used by ``DistributedLock``."""

    def __init__(self):
        self.store: dict[str, str] = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def eval(self, script, numkeys, key, token):
        if self.store.get(key) == token:
            del self.store[key]
            return 1
        return 0


# ── Principals ────────────────────────────────────────────────────────


def principal(user_id: str) -> Principal:
    return Principal(user_id=user_id)


ADMIN = Principal(user_id="admin-1", claims=frozenset({ADMIN_CLAIM}))


def headers(user_id: str, *claims: str) -> dict[str, str]:
    h = {"X-User-Id": user_id}
    if claims:
        h["X-User-Claims"] = ",".join(claims)
    return h


# ── Factories ─────────────────────────────────────────────────────────


async def make_driver(
    session: AsyncSession,
    driver_id: str,
    *,
    name: Optional[str] = None,
    location_id: str = "pittsburgh",
    rating: Optional[float] = 5.0,
    available: bool = True,
    is_active: bool = True,
) -> DriverModel:
    driver = DriverModel(
        id=driver_id,
        name=name or f"Driver {driver_id}",
        email=f"{driver_id}@example.com",
        location_id=location_id,
        rating=rating,
        available=available,
        is_active=is_active,
        approval_status=ApprovalStatus.APPROVED,
    )
    session.add(driver)
    await session.flush()
    return driver


async def make_rider(session: AsyncSession, rider_id: str, name: str = "Riley") -> RiderModel:
    rider = RiderModel(id=rider_id, name=name, phone="412-555-0100")
    session.add(rider)
    await session.flush()
    return rider


async def make_ride(
    session: AsyncSession,
    *,
    rider_id: Optional[str] = "rider-1",
    driver_id: Optional[str] = None,
    status: RideStatus = RideStatus.PENDING,
    location_id: str = "pittsburgh",
    **extra,
) -> RideModel:
    ride = RideModel(
        rider_id=rider_id,
        customer_name="Riley",
        phone="412-555-0100",
        pickup="Airport",
        dropoff="Downtown",
        location_id=location_id,
        status=status,
        driver_id=driver_id,
        available_drivers=[],
        **extra,
    )
    session.add(ride)
    await session.flush()
    return ride


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh SQLite file per test; separate connections see each other's commits."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'ridelink.db'}", echo=False
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest_asyncio.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client wired to the test database and a fake Redis."""
    from ridelink.api.app import create_app
    from ridelink.api.dependencies import get_db, get_redis_client
    from ridelink.api.middleware import limiter

    async def _override_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def _override_redis():
        return fake_redis

    with patch("ridelink.workers.webhooks.start_dispatcher", new_callable=AsyncMock), \
         patch("ridelink.workers.webhooks.stop_dispatcher", new_callable=AsyncMock):
        app = create_app()
        app.dependency_overrides[get_db] = _override_db
        app.dependency_overrides[get_redis_client] = _override_redis
        limiter.reset()

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac

        app.dependency_overrides.clear()
