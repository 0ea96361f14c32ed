# biketrail/ride/route.py
"""
Route accumulator: the ordered fixes of one ride.

Fixes are expected in chronological order (the location source delivers them
that way); ordering is not checked here. Whether a fix may be appended is
decided by the owning RideSession, not by the route.
"""

from __future__ import annotations

from typing import Iterator, Optional

from biketrail.ride.geo import distance_km
from biketrail.ride.models import LocationFix


class Route:
    def __init__(self) -> None:
        self._fixes: list[LocationFix] = []

    def reset(self) -> None:
        """Drop every fix. Persist the route first if it should be kept."""
        self._fixes.clear()

    def append(self, fix: LocationFix) -> None:
        self._fixes.append(fix)

    def total_distance_km(self) -> float:
        """Sum of distances between consecutive fixes; 0 for fewer than two."""
        return sum(
            distance_km(a.latitude, a.longitude, b.latitude, b.longitude)
            for a, b in zip(self._fixes, self._fixes[1:])
        )

    @property
    def first(self) -> Optional[LocationFix]:
        return self._fixes[0] if self._fixes else None

    @property
    def last(self) -> Optional[LocationFix]:
        return self._fixes[-1] if self._fixes else None

    def snapshot(self) -> tuple[LocationFix, ...]:
        """Immutable copy of the current fixes (for rendering or persistence)."""
        return tuple(self._fixes)

    def __len__(self) -> int:
        return len(self._fixes)

    def __iter__(self) -> Iterator[LocationFix]:
        return iter(self._fixes)
