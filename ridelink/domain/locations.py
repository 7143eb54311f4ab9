"""Fixed service-area catalog. Drivers and rides reference entries by id."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Location:
    id: str
    name: str
    region: str
    description: str


LOCATIONS: tuple[Location, ...] = (
    Location(
        id="pittsburgh",
        name="Pittsburgh",
        region="Pennsylvania",
        description="Serving the greater Pittsburgh metropolitan area",
    ),
    Location(
        id="swfl",
        name="South West Florida",
        region="Florida",
        description="Serving Fort Myers, Naples, and surrounding areas",
    ),
)

_BY_ID = {loc.id: loc for loc in LOCATIONS}


def get_location(location_id: str) -> Optional[Location]:
    return _BY_ID.get(location_id)


def is_known_location(location_id: str) -> bool:
    return location_id in _BY_ID
