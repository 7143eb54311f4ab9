"""
Driver ranking for the availability listing.

Drivers are ordered by rating, highest first.  A missing rating sorts as
0 (while ride snapshots display it as the default rating).  Python's sort
is stable, so equal ratings keep the order the store returned them in;
no further tie-break is defined.

Complexity: O(n log n).
"""

from __future__ import annotations

from typing import Iterable, TypeVar

T = TypeVar("T")


def rating_sort_key(driver) -> float:
    return driver.rating if driver.rating is not None else 0.0


def rank_by_rating(drivers: Iterable[T]) -> list[T]:
    return sorted(drivers, key=rating_sort_key, reverse=True)
