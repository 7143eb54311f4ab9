"""
Integration tests for the REST API endpoints.

Runs the real application against the per-test SQLite database and a
fake Redis; the caller identity is passed in the gateway headers.
"""

from __future__ import annotations

import pytest

from ridelink.domain.enums import RideStatus
from tests.conftest import headers, make_driver, make_ride

API = "/api/v1"


async def _seed_drivers(session_factory):
    async with session_factory() as session:
        await make_driver(session, "d1", name="Maria", rating=4.9)
        await make_driver(session, "d2", name="James", rating=4.5)
        await make_driver(session, "d3", name="Dana", rating=4.7, available=False)
        await make_driver(session, "fl", name="Luis", location_id="swfl")
        await session.commit()


class TestLocationsAndDrivers:
    @pytest.mark.asyncio
    async def test_locations(self, client):
        resp = await client.get(f"{API}/locations")

        assert resp.status_code == 200
        assert {loc["id"] for loc in resp.json()} == {"pittsburgh", "swfl"}

    @pytest.mark.asyncio
    async def test_available_drivers_sorted_by_rating(self, client, session_factory):
        await _seed_drivers(session_factory)

        resp = await client.get(f"{API}/drivers/available", params={"location_id": "pittsburgh"})

        assert resp.status_code == 200
        body = resp.json()
        assert [d["id"] for d in body] == ["d1", "d2"]
        assert body[0]["isActive"] is True
        assert body[0]["locationId"] == "pittsburgh"

    @pytest.mark.asyncio
    async def test_register_then_go_online(self, client):
        resp = await client.post(
            f"{API}/drivers",
            json={"name": "Hannah Reed", "email": "hannah@example.com", "locationId": "swfl"},
            headers=headers("new-driver"),
        )
        assert resp.status_code == 201
        assert resp.json()["approvalStatus"] == "pending"
        assert resp.json()["available"] is False

        resp = await client.put(
            f"{API}/drivers/new-driver/availability",
            json={"available": True},
            headers=headers("new-driver"),
        )
        assert resp.status_code == 200

        resp = await client.get(f"{API}/drivers/available", params={"location_id": "swfl"})
        assert [d["id"] for d in resp.json()] == ["new-driver"]

    @pytest.mark.asyncio
    async def test_registration_requires_identity(self, client):
        resp = await client.post(
            f"{API}/drivers",
            json={"name": "Hannah Reed", "email": "hannah@example.com", "locationId": "swfl"},
        )
        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_driver(self, client):
        resp = await client.get(f"{API}/drivers/ghost")
        assert resp.status_code == 404
        assert "ghost" in resp.json()["detail"]


class TestRideEndpoints:
    @pytest.mark.asyncio
    async def test_create_pending_ride(self, client, session_factory):
        await _seed_drivers(session_factory)

        resp = await client.post(
            f"{API}/rides",
            json={
                "name": "Alex",
                "phone": "412-555-0101",
                "pickup": "Airport",
                "dropoff": "Oakland",
                "locationId": "pittsburgh",
            },
        )

        assert resp.status_code == 201
        ride = resp.json()
        assert ride["status"] == "pending"
        assert ride["driverId"] is None
        assert [d["id"] for d in ride["availableDrivers"]] == ["d1", "d2"]

        listed = await client.get(
            f"{API}/rides", params={"location_id": "pittsburgh"}, headers=headers("d1")
        )
        assert [r["id"] for r in listed.json()] == [ride["id"]]

    @pytest.mark.asyncio
    async def test_create_with_selected_driver(self, client, session_factory):
        await _seed_drivers(session_factory)

        resp = await client.post(
            f"{API}/rides",
            json={
                "name": "Alex",
                "phone": "412-555-0101",
                "locationId": "pittsburgh",
                "selectedDriverId": "d2",
            },
            headers=headers("rider-1"),
        )

        assert resp.status_code == 201
        ride = resp.json()
        assert ride["status"] == "assigned"
        assert ride["driverId"] == "d2"
        assert ride["riderId"] == "rider-1"
        assert ride["assignedDriver"]["name"] == "James"

        notes = await client.get(f"{API}/notifications", headers=headers("d2"))
        assert [n["type"] for n in notes.json()] == ["ride_request"]

    @pytest.mark.asyncio
    async def test_create_validation(self, client):
        resp = await client.post(f"{API}/rides", json={"phone": "1", "locationId": "pittsburgh"})
        assert resp.status_code == 422

        resp = await client.post(
            f"{API}/rides", json={"name": "Alex", "phone": "1", "locationId": "mars"}
        )
        assert resp.status_code == 422
        assert "Unknown location" in resp.json()["detail"]

    @pytest.mark.asyncio
    async def test_selected_driver_offline_is_conflict(self, client, session_factory):
        await _seed_drivers(session_factory)

        resp = await client.post(
            f"{API}/rides",
            json={"name": "Alex", "phone": "1", "locationId": "pittsburgh", "selectedDriverId": "d3"},
        )

        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_transfer_and_complete(self, client, session_factory, fake_redis):
        await _seed_drivers(session_factory)
        async with session_factory() as session:
            ride = await make_ride(session, driver_id="d1", status=RideStatus.ASSIGNED)
            await session.commit()

        resp = await client.post(
            f"{API}/rides/{ride.id}/transfer",
            json={"fromDriverId": "d1", "toDriverId": "d2", "transferFeeAmount": 4.0},
            headers=headers("d1"),
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "transferred"
        assert body["driverId"] == "d2"
        assert body["previousDriverId"] == "d1"
        assert body["transferFeeAmount"] == 4.0
        assert fake_redis.store == {}

        resp = await client.post(
            f"{API}/rides/{ride.id}/assign", json={"driverId": "d2"}, headers=headers("d2")
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "assigned"

        resp = await client.post(f"{API}/rides/{ride.id}/complete", headers=headers("d2"))
        assert resp.status_code == 200
        assert resp.json()["status"] == "completed"

        driver = await client.get(f"{API}/drivers/d2")
        assert driver.json()["completedRides"] == 1
        assert driver.json()["totalRides"] == 1

        history = await client.get(f"{API}/drivers/d2/rides", headers=headers("d2"))
        assert [r["id"] for r in history.json()] == [ride.id]

    @pytest.mark.asyncio
    async def test_transfer_by_other_driver_forbidden(self, client, session_factory):
        await _seed_drivers(session_factory)
        async with session_factory() as session:
            ride = await make_ride(session, driver_id="d1", status=RideStatus.ASSIGNED)
            await session.commit()

        resp = await client.post(
            f"{API}/rides/{ride.id}/transfer",
            json={"fromDriverId": "d1", "toDriverId": "d2"},
            headers=headers("d2"),
        )
        assert resp.status_code == 403

        ride_now = await client.get(f"{API}/rides/{ride.id}", headers=headers("d1"))
        assert ride_now.json()["driverId"] == "d1"
        assert ride_now.json()["status"] == "assigned"

    @pytest.mark.asyncio
    async def test_transfer_while_locked(self, client, session_factory, fake_redis):
        await _seed_drivers(session_factory)
        async with session_factory() as session:
            ride = await make_ride(session, driver_id="d1", status=RideStatus.ASSIGNED)
            await session.commit()
        fake_redis.store[f"lock:ride:{ride.id}"] = "someone-else"

        resp = await client.post(
            f"{API}/rides/{ride.id}/transfer",
            json={"fromDriverId": "d1", "toDriverId": "d2"},
            headers=headers("d1"),
        )

        assert resp.status_code == 409
        assert fake_redis.store[f"lock:ride:{ride.id}"] == "someone-else"

    @pytest.mark.asyncio
    async def test_status_patch_and_cancel(self, client, session_factory):
        async with session_factory() as session:
            ride = await make_ride(session)
            await session.commit()

        resp = await client.patch(
            f"{API}/rides/{ride.id}/status",
            json={"status": "completed"},
            headers=headers("rider-1"),
        )
        assert resp.status_code == 403

        resp = await client.post(f"{API}/rides/{ride.id}/cancel", headers=headers("rider-1"))
        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"

        resp = await client.post(f"{API}/rides/{ride.id}/cancel", headers=headers("rider-1"))
        assert resp.status_code == 409

    @pytest.mark.asyncio
    async def test_only_new_driver_confirms_hand_over(self, client, session_factory):
        await _seed_drivers(session_factory)
        async with session_factory() as session:
            ride = await make_ride(session, driver_id="d2", status=RideStatus.TRANSFERRED)
            await session.commit()

        for caller in ("rider-1", "stranger"):
            resp = await client.patch(
                f"{API}/rides/{ride.id}/status",
                json={"status": "assigned"},
                headers=headers(caller),
            )
            assert resp.status_code == 403

        ride_now = await client.get(f"{API}/rides/{ride.id}", headers=headers("d2"))
        assert ride_now.json()["status"] == "transferred"

        resp = await client.patch(
            f"{API}/rides/{ride.id}/status",
            json={"status": "assigned"},
            headers=headers("d2"),
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "assigned"

    @pytest.mark.asyncio
    async def test_ride_details_need_a_participant(self, client, session_factory):
        await _seed_drivers(session_factory)
        async with session_factory() as session:
            ride = await make_ride(session, driver_id="d1", status=RideStatus.ASSIGNED)
            await session.commit()

        assert (await client.get(f"{API}/rides/{ride.id}")).status_code == 401
        assert (await client.get(f"{API}/rides")).status_code == 401

        resp = await client.get(f"{API}/rides/{ride.id}", headers=headers("stranger"))
        assert resp.status_code == 403

        resp = await client.get(f"{API}/rides/{ride.id}", headers=headers("rider-1"))
        assert resp.status_code == 200
        assert resp.json()["phone"]

    @pytest.mark.asyncio
    async def test_unknown_ride(self, client):
        resp = await client.get(f"{API}/rides/nope", headers=headers("rider-1"))
        assert resp.status_code == 404


class TestTransferEndpoints:
    @pytest.mark.asyncio
    async def test_offer_and_accept(self, client, session_factory):
        await _seed_drivers(session_factory)
        async with session_factory() as session:
            ride = await make_ride(session, driver_id="d1", status=RideStatus.ASSIGNED)
            await session.commit()

        resp = await client.post(
            f"{API}/transfers",
            json={"rideId": ride.id, "newDriverId": "d2", "transferFeeAmount": 2.5},
            headers=headers("d1"),
        )
        assert resp.status_code == 201
        transfer = resp.json()
        assert transfer["status"] == "pending"

        incoming = await client.get(f"{API}/transfers/incoming", headers=headers("d2"))
        assert [t["id"] for t in incoming.json()] == [transfer["id"]]

        resp = await client.post(
            f"{API}/transfers/{transfer['id']}/accept", headers=headers("d2")
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "accepted"

        ride_now = await client.get(f"{API}/rides/{ride.id}", headers=headers("d2"))
        assert ride_now.json()["driverId"] == "d2"
        assert ride_now.json()["status"] == "transferred"

        history = await client.get(f"{API}/transfers/history", headers=headers("d1"))
        assert [t["status"] for t in history.json()] == ["accepted"]


class TestAdminEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get(f"{API}/admin/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_review_requires_admin_claim(self, client):
        await client.post(
            f"{API}/drivers",
            json={"name": "Hannah Reed", "email": "hannah@example.com", "locationId": "swfl"},
            headers=headers("d9"),
        )

        resp = await client.get(f"{API}/admin/drivers/pending", headers=headers("d9"))
        assert resp.status_code == 403

        resp = await client.get(f"{API}/admin/drivers/pending", headers=headers("a1", "admin"))
        assert [d["id"] for d in resp.json()] == ["d9"]

        resp = await client.post(
            f"{API}/admin/drivers/d9/review",
            json={"decision": "approved"},
            headers=headers("a1", "admin"),
        )
        assert resp.status_code == 200
        assert resp.json()["approvalStatus"] == "approved"
