# biketrail/report.py
"""
Plain-text ride reports for the terminal.
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from biketrail.achievements import Achievement
from biketrail.ride.models import RideStatistics

TSV_HEADER = "ride\tstarted\tfixes\tdistance_km\tactive_h\tavg_kmh\tpaused_s"


def format_started(started_at_ms: Optional[int]) -> str:
    if started_at_ms is None:
        return "-"
    started = dt.datetime.fromtimestamp(started_at_ms / 1000.0).astimezone()
    return started.isoformat(sep=" ", timespec="seconds")


def format_report(
        label: str,
        stats: RideStatistics,
        *,
        fixes: int,
        started_at_ms: Optional[int] = None,
        places: int = 2,
        tsv: bool = False,
) -> str:
    s = stats.rounded(places)
    if tsv:
        return (
            f"{label}\t"
            f"{format_started(started_at_ms)}\t"
            f"{fixes}\t"
            f"{s.distance_km:.{places}f}\t"
            f"{s.active_time_hours:.{places}f}\t"
            f"{s.average_speed_kmh:.{places}f}\t"
            f"{s.paused_seconds}"
        )
    return "\n".join([
        f"\n{label}",
        f"  started        : {format_started(started_at_ms)}",
        f"  fixes          : {fixes}",
        f"  distance (km)  : {s.distance_km:.{places}f}",
        f"  time (h)       : {s.active_time_hours:.{places}f}",
        f"  avg speed km/h : {s.average_speed_kmh:.{places}f}",
        f"  paused (s)     : {s.paused_seconds}",
    ])


def format_achievement(a: Achievement) -> str:
    mark = "x" if a.unlocked else " "
    return f"[{mark}] {a.title:<14} {a.progress:>3}%  {a.description}"
