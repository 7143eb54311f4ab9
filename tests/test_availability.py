"""Tests for the available-driver listing and its rating order."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from ridelink.domain.availability import rank_by_rating
from ridelink.domain.entities import DriverCard
from ridelink.infrastructure.models import DriverModel
from ridelink.services.availability import list_available_drivers
from tests.conftest import make_driver


class TestRankByRating:
    def test_highest_rating_first(self):
        drivers = [SimpleNamespace(rating=r) for r in (4.1, 4.9, 3.0)]
        assert [d.rating for d in rank_by_rating(drivers)] == [4.9, 4.1, 3.0]

    def test_missing_rating_sorts_last(self):
        unrated = SimpleNamespace(rating=None)
        rated = SimpleNamespace(rating=1.0)
        assert rank_by_rating([unrated, rated]) == [rated, unrated]

    def test_empty_input(self):
        assert rank_by_rating([]) == []


class TestDriverCard:
    def test_unrated_driver_displays_default(self):
        driver = SimpleNamespace(id="d1", name="Dana", photo_url=None, rating=None)
        card = DriverCard.from_driver(driver, default_rating=5.0)
        assert card.rating == 5.0
        assert card.photo == ""

    def test_as_dict_merges_extra_fields(self):
        card = DriverCard(id="d1", name="Dana", photo="p.png", rating=4.5)
        data = card.as_dict(assignedAt="2026-01-01T00:00:00+00:00")
        assert data == {
            "id": "d1",
            "name": "Dana",
            "photo": "p.png",
            "rating": 4.5,
            "assignedAt": "2026-01-01T00:00:00+00:00",
        }


class TestListAvailableDrivers:
    @pytest.mark.asyncio
    async def test_filters_and_sorts(self, db_session):
        await make_driver(db_session, "a", rating=4.5)
        await make_driver(db_session, "b", rating=4.9)
        await make_driver(db_session, "c", rating=4.8, available=False)
        await make_driver(db_session, "d", rating=5.0, is_active=False)
        await make_driver(db_session, "e", rating=4.7, location_id="swfl")

        drivers = await list_available_drivers(db_session, "pittsburgh")

        assert [d.id for d in drivers] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_no_location_lists_every_area(self, db_session):
        await make_driver(db_session, "a", rating=4.5)
        await make_driver(db_session, "e", rating=4.7, location_id="swfl")

        drivers = await list_available_drivers(db_session)

        assert [d.id for d in drivers] == ["e", "a"]

    @pytest.mark.asyncio
    async def test_unrated_driver_sorts_after_rated(self, db_session):
        await make_driver(db_session, "unrated", rating=None)
        await make_driver(db_session, "low", rating=1.0)

        drivers = await list_available_drivers(db_session, "pittsburgh")

        assert [d.id for d in drivers] == ["low", "unrated"]

    @pytest.mark.asyncio
    async def test_missing_rating_is_stored_as_null(self, session_factory):
        async with session_factory() as session:
            await make_driver(session, "unrated", rating=None)
            await session.commit()

        async with session_factory() as session:
            stored = await session.get(DriverModel, "unrated")
            assert stored.rating is None

    @pytest.mark.asyncio
    async def test_unknown_location_lists_nobody(self, db_session):
        await make_driver(db_session, "a")
        assert await list_available_drivers(db_session, "atlantis") == []

    @pytest.mark.asyncio
    async def test_empty_store(self, db_session):
        assert await list_available_drivers(db_session, "swfl") == []
