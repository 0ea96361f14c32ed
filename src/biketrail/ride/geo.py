# biketrail/ride/geo.py
"""
Geodesic helpers for ride tracking.

Distances use the spherical-earth haversine formula from the `haversine`
package (fixed mean earth radius). Latitude/longitude ranges are not
validated: out-of-range inputs give mathematically defined but physically
meaningless results.
"""

from __future__ import annotations

from typing import Optional

from haversine import haversine, Unit

MPS_TO_KMH = 3.6


def distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometers between two points given in degrees."""
    return haversine((lat1, lon1), (lat2, lon2), unit=Unit.KILOMETERS)


def mps_to_kmh(speed_mps: Optional[float]) -> float:
    """
    Convert a reported speed in m/s to km/h for display.

    Sources report a missing or invalid speed as None or a negative
    sentinel (-1.0); both display as 0.
    """
    if speed_mps is None or speed_mps <= 0:
        return 0.0
    return speed_mps * MPS_TO_KMH
