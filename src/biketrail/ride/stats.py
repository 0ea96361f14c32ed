# biketrail/ride/stats.py
"""
Ride statistics calculator.

Statistics are always recomputed from the full route and the pause total;
nothing is updated incrementally.
"""

from __future__ import annotations

from biketrail.ride.models import RideStatistics
from biketrail.ride.route import Route

MS_PER_HOUR = 3_600_000


def compute_statistics(route: Route, paused_seconds: int) -> RideStatistics:
    """
    Derive distance, active time and average speed for a route.

    - Fewer than two fixes: everything but `paused_seconds` is zero.
    - Active time is the first-to-last wall clock span minus paused time.
      If that is not positive (an unclosed pause, clock skew), distance is
      still reported but speed and active time are zero.
    """
    if len(route) < 2:
        return RideStatistics(paused_seconds=paused_seconds)

    distance = route.total_distance_km()

    wall_clock_ms = route.last.timestamp_ms - route.first.timestamp_ms
    active_ms = wall_clock_ms - paused_seconds * 1000

    if active_ms <= 0:
        return RideStatistics(distance_km=distance, paused_seconds=paused_seconds)

    active_hours = active_ms / MS_PER_HOUR
    return RideStatistics(
        distance_km=distance,
        average_speed_kmh=distance / active_hours,
        active_time_hours=active_hours,
        paused_seconds=paused_seconds,
    )
