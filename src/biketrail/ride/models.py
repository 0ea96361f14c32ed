# biketrail/ride/models.py
"""Data models for ride tracking: fixes, session states and statistics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class LocationFix:
    """
    A single GPS sample.

    Attributes:
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        timestamp_ms: Unix epoch milliseconds.
        speed_mps: Instantaneous speed reported by the source, if any.
    """

    latitude: float
    longitude: float
    timestamp_ms: int
    speed_mps: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp_ms,
            "speed": self.speed_mps,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LocationFix":
        speed = data.get("speed")
        return cls(
            latitude=float(data["latitude"]),
            longitude=float(data["longitude"]),
            timestamp_ms=int(data["timestamp"]),
            speed_mps=float(speed) if speed is not None else None,
        )


class RideState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True, slots=True)
class RideStatistics:
    """
    Aggregate statistics for one ride.

    Values are kept at full precision; use `rounded()` for display.
    """

    distance_km: float = 0.0
    average_speed_kmh: float = 0.0
    active_time_hours: float = 0.0
    paused_seconds: int = 0

    def rounded(self, places: int = 2) -> "RideStatistics":
        return RideStatistics(
            distance_km=round(self.distance_km, places),
            average_speed_kmh=round(self.average_speed_kmh, places),
            active_time_hours=round(self.active_time_hours, places),
            paused_seconds=self.paused_seconds,
        )


@dataclass(frozen=True, slots=True)
class RideSummary:
    """A completed ride as handed to a persistence sink."""

    route: tuple[LocationFix, ...]
    statistics: RideStatistics

    @property
    def started_at_ms(self) -> Optional[int]:
        return self.route[0].timestamp_ms if self.route else None
