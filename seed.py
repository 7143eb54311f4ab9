"""
Seed script -- populates the database with sample data for reviewers.

Run after migrations:
    python seed.py

Creates:
  - 6 approved drivers across Pittsburgh and South West Florida
  - 4 sample riders
  - 5 sample rides (mix of PENDING, ASSIGNED, COMPLETED)
  - 1 accepted connection and 1 scheduled ride
"""

import asyncio
from datetime import date, time, timedelta

from sqlalchemy import text

from ridelink.domain.entities import DriverCard, utcnow
from ridelink.domain.enums import (
    ApprovalStatus,
    ConnectionStatus,
    RideStatus,
    ScheduledRideStatus,
)
from ridelink.infrastructure.database import async_session_factory, engine
from ridelink.infrastructure.models import (
    ConnectionModel,
    DriverModel,
    RideModel,
    RiderModel,
    ScheduledRideModel,
)


DRIVERS = [
    {"id": "drv-pgh-1", "name": "Maria Lopez", "location_id": "pittsburgh", "rating": 4.9, "available": True},
    {"id": "drv-pgh-2", "name": "James Carter", "location_id": "pittsburgh", "rating": 4.6, "available": True},
    {"id": "drv-pgh-3", "name": "Dana Kim", "location_id": "pittsburgh", "rating": None, "available": False},
    {"id": "drv-swfl-1", "name": "Luis Ortega", "location_id": "swfl", "rating": 4.8, "available": True},
    {"id": "drv-swfl-2", "name": "Hannah Reed", "location_id": "swfl", "rating": 4.2, "available": True},
    {"id": "drv-swfl-3", "name": "Omar Haddad", "location_id": "swfl", "rating": 4.7, "available": False},
]

RIDERS = [
    {"id": "rdr-1", "name": "Alex Turner", "phone": "412-555-0101"},
    {"id": "rdr-2", "name": "Priya Shah", "phone": "412-555-0102"},
    {"id": "rdr-3", "name": "Sam Brooks", "phone": "239-555-0103"},
    {"id": "rdr-4", "name": "Nina Volkova", "phone": "239-555-0104"},
]


async def seed():
    async with async_session_factory() as session:
        # Check if already seeded
        result = await session.execute(text("SELECT count(*) FROM drivers"))
        if result.scalar() > 0:
            print("Database already seeded. Skipping.")
            return

        # ── Drivers ───────────────────────────────────────────────────
        drivers = {}
        for d in DRIVERS:
            m = DriverModel(
                id=d["id"],
                name=d["name"],
                email=f"{d['id']}@example.com",
                location_id=d["location_id"],
                rating=d["rating"],
                available=d["available"],
                is_active=True,
                approval_status=ApprovalStatus.APPROVED,
                vehicle={"make": "Toyota", "model": "Camry", "year": 2021, "color": "Silver"},
            )
            session.add(m)
            drivers[m.id] = m
        await session.flush()
        print(f"  Created {len(drivers)} drivers")

        # ── Riders ────────────────────────────────────────────────────
        for r in RIDERS:
            session.add(RiderModel(id=r["id"], name=r["name"], phone=r["phone"]))
        await session.flush()
        print(f"  Created {len(RIDERS)} riders")

        # ── Rides ─────────────────────────────────────────────────────
        pgh_cards = [
            DriverCard.from_driver(drivers["drv-pgh-1"]).as_dict(),
            DriverCard.from_driver(drivers["drv-pgh-2"]).as_dict(),
        ]
        swfl_cards = [
            DriverCard.from_driver(drivers["drv-swfl-1"]).as_dict(),
            DriverCard.from_driver(drivers["drv-swfl-2"]).as_dict(),
        ]
        rides_data = [
            # PENDING rides waiting for a driver
            {"rider": RIDERS[0], "location_id": "pittsburgh", "pickup": "PIT Airport",
             "dropoff": "Shadyside", "status": RideStatus.PENDING, "driver": None,
             "cards": pgh_cards},
            {"rider": RIDERS[2], "location_id": "swfl", "pickup": "RSW Airport",
             "dropoff": "Naples Pier", "status": RideStatus.PENDING, "driver": None,
             "cards": swfl_cards},
            # ASSIGNED rides
            {"rider": RIDERS[1], "location_id": "pittsburgh", "pickup": "Strip District",
             "dropoff": "Oakland", "status": RideStatus.ASSIGNED, "driver": "drv-pgh-1",
             "cards": pgh_cards},
            {"rider": RIDERS[3], "location_id": "swfl", "pickup": "Fort Myers Beach",
             "dropoff": "Sanibel", "status": RideStatus.ASSIGNED, "driver": "drv-swfl-1",
             "cards": swfl_cards},
            # COMPLETED ride
            {"rider": RIDERS[0], "location_id": "pittsburgh", "pickup": "Downtown",
             "dropoff": "PIT Airport", "status": RideStatus.COMPLETED, "driver": "drv-pgh-2",
             "cards": pgh_cards},
        ]

        for r in rides_data:
            driver = drivers.get(r["driver"])
            ride = RideModel(
                rider_id=r["rider"]["id"],
                customer_name=r["rider"]["name"],
                phone=r["rider"]["phone"],
                pickup=r["pickup"],
                dropoff=r["dropoff"],
                location_id=r["location_id"],
                status=r["status"],
                driver_id=driver.id if driver else None,
                assigned_driver=DriverCard.from_driver(driver).as_dict() if driver else None,
                available_drivers=r["cards"],
            )
            if r["status"] == RideStatus.COMPLETED:
                ride.completed_at = utcnow()
                driver.total_rides += 1
                driver.completed_rides += 1
            session.add(ride)
        await session.flush()
        print(f"  Created {len(rides_data)} rides")

        # ── Connections & schedule ────────────────────────────────────
        session.add(
            ConnectionModel(
                driver_id="drv-pgh-1",
                rider_id="rdr-2",
                requested_by="rdr-2",
                status=ConnectionStatus.ACCEPTED,
            )
        )
        session.add(
            ScheduledRideModel(
                driver_id="drv-pgh-1",
                rider_id="rdr-2",
                rider_name="Priya Shah",
                date=date.today() + timedelta(days=3),
                time=time(9, 30),
                pickup="Squirrel Hill",
                dropoff="PIT Airport",
                status=ScheduledRideStatus.CONFIRMED,
            )
        )
        await session.flush()
        print("  Created 1 connection and 1 scheduled ride")

        await session.commit()
        print("\nSeed complete!")


async def main():
    print("Seeding database...")
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
