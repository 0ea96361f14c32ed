# biketrail/achievements.py
"""
Achievements derived from stored ride history.

Each achievement reports whether it is unlocked and a 0-100 progress value
toward unlocking it. Evaluation is pure: it reads statistics and start times
only and never touches the database itself.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable, Optional

from biketrail.ride.models import RideStatistics

CENTURY_KM = 100.0
SPEED_DEMON_KMH = 30.0
SPEED_DEMON_MIN_KM = 20.0
EARLY_BIRD_RIDES = 5
IRON_BUTT_HOURS = 6.0


@dataclass(frozen=True)
class Achievement:
    key: str
    title: str
    description: str
    unlocked: bool
    progress: int


@dataclass(frozen=True)
class RideRecord:
    """The parts of a ride that achievements look at."""

    statistics: RideStatistics
    started_at_ms: Optional[int] = None


def _pct(fraction: float) -> int:
    return int(max(0.0, min(1.0, fraction)) * 100)


def _started_before(started_at_ms: Optional[int], hour: int, tz: Optional[dt.tzinfo]) -> bool:
    if started_at_ms is None:
        return False
    started = dt.datetime.fromtimestamp(started_at_ms / 1000.0, tz=tz)
    return started.hour < hour


def evaluate_achievements(
        rides: Iterable[RideRecord], *,
        early_bird_hour: int = 7,
        tz: Optional[dt.tzinfo] = None,
) -> list[Achievement]:
    """
    Evaluate every achievement over `rides`.

    `tz` is the zone used to decide whether a ride started early; None means
    the local system zone.
    """
    rides = list(rides)

    best_km = max((r.statistics.distance_km for r in rides), default=0.0)
    best_hours = max((r.statistics.active_time_hours for r in rides), default=0.0)
    best_speed_demon = max(
        (
            min(
                r.statistics.distance_km / SPEED_DEMON_MIN_KM,
                r.statistics.average_speed_kmh / SPEED_DEMON_KMH,
            )
            for r in rides
        ),
        default=0.0,
    )
    early = sum(1 for r in rides if _started_before(r.started_at_ms, early_bird_hour, tz))

    return [
        Achievement(
            key="century_rider",
            title="Century Rider",
            description=f"Complete a {CENTURY_KM:g} km ride",
            unlocked=best_km >= CENTURY_KM,
            progress=_pct(best_km / CENTURY_KM),
        ),
        Achievement(
            key="speed_demon",
            title="Speed Demon",
            description=(
                f"Achieve an average speed of {SPEED_DEMON_KMH:g} km/h "
                f"on a {SPEED_DEMON_MIN_KM:g} km ride"
            ),
            unlocked=best_speed_demon >= 1.0,
            progress=_pct(best_speed_demon),
        ),
        Achievement(
            key="early_bird",
            title="Early Bird",
            description=f"Complete {EARLY_BIRD_RIDES} rides before {early_bird_hour} AM",
            unlocked=early >= EARLY_BIRD_RIDES,
            progress=_pct(early / EARLY_BIRD_RIDES),
        ),
        Achievement(
            key="iron_butt",
            title="Iron Butt",
            description=f"Ride for {IRON_BUTT_HOURS:g} hours in a single session",
            unlocked=best_hours >= IRON_BUTT_HOURS,
            progress=_pct(best_hours / IRON_BUTT_HOURS),
        ),
    ]
