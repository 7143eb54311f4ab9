"""
Domain value objects.

Patterns used
-------------
- **State Pattern** via ``StateMachine``: one instance per lifecycle
  (rides, transfers, connections, scheduled rides) guards every status
  write.
- ``Principal`` is the explicit caller context handed to every workflow.
- ``DriverCard`` is the denormalised driver summary embedded in rides.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from .enums import (
    CONNECTION_TRANSITIONS,
    RIDE_TRANSITIONS,
    SCHEDULED_RIDE_TRANSITIONS,
    TRANSFER_TRANSITIONS,
)
from .exceptions import InvalidStateTransition

ADMIN_CLAIM = "admin"


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, as vouched for by the identity provider."""

    user_id: str
    claims: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return ADMIN_CLAIM in self.claims

    def is_any(self, *user_ids: Optional[str]) -> bool:
        return self.user_id in user_ids


@dataclass(frozen=True)
class DriverCard:
    id: str
    name: str
    photo: str = ""
    rating: float = 5.0

    @classmethod
    def from_driver(cls, driver: Any, default_rating: float = 5.0) -> "DriverCard":
        # Unrated drivers display the default even though they sort as 0.
        rating = driver.rating if driver.rating is not None else default_rating
        return cls(
            id=driver.id,
            name=driver.name,
            photo=driver.photo_url or "",
            rating=rating,
        )

    def as_dict(self, **extra: Any) -> dict[str, Any]:
        data = {"id": self.id, "name": self.name, "photo": self.photo, "rating": self.rating}
        data.update(extra)
        return data


# ── State machines ────────────────────────────────────────────────────


@dataclass(frozen=True)
class StateMachine:
    name: str
    transitions: Mapping[Enum, set]

    def can_transition(self, current: Enum, new: Enum) -> bool:
        return new in self.transitions.get(current, set())

    def check(self, current: Enum, new: Enum) -> None:
        """Raise ``InvalidStateTransition`` unless *current* -> *new* is legal."""
        if not self.can_transition(current, new):
            raise InvalidStateTransition(
                f"Cannot transition {self.name} from {current.value} to {new.value}"
            )

    def is_terminal(self, status: Enum) -> bool:
        return not self.transitions.get(status)


RIDE_LIFECYCLE = StateMachine("ride", RIDE_TRANSITIONS)
TRANSFER_LIFECYCLE = StateMachine("transfer", TRANSFER_TRANSITIONS)
CONNECTION_LIFECYCLE = StateMachine("connection", CONNECTION_TRANSITIONS)
SCHEDULED_RIDE_LIFECYCLE = StateMachine("scheduled ride", SCHEDULED_RIDE_TRANSITIONS)


def is_eligible_for_assignment(driver: Any) -> bool:
    """A driver can take rides only while both available and active."""
    return bool(driver.available) and bool(driver.is_active)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
