# biketrail/ride/session.py
"""
Ride session state machine.

    IDLE -> TRACKING -> {PAUSED <-> TRACKING} -> STOPPED

STOPPED keeps the finished ride's route and statistics until the next
start(), which clears them and begins a fresh TRACKING session.

Every transition returns True when performed and False when the current
state does not allow it; a rejected transition changes nothing. Times are
epoch milliseconds; when a caller does not pass one, the session clock is
used.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from biketrail.ride.geo import mps_to_kmh
from biketrail.ride.models import LocationFix, RideState, RideStatistics
from biketrail.ride.pause import PauseLedger
from biketrail.ride.route import Route
from biketrail.ride.stats import compute_statistics


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


class RideSession:
    def __init__(self, clock: Callable[[], int] = wall_clock_ms) -> None:
        self._clock = clock
        self.state = RideState.IDLE
        self.route = Route()
        self.pause_ledger = PauseLedger()
        self.statistics = RideStatistics()
        self.current_speed_kmh = 0.0

    def _now(self, now_ms: Optional[int]) -> int:
        return self._clock() if now_ms is None else now_ms

    def start(self) -> bool:
        if self.state not in (RideState.IDLE, RideState.STOPPED):
            return False
        self.route.reset()
        self.pause_ledger.reset()
        self.statistics = RideStatistics()
        self.current_speed_kmh = 0.0
        self.state = RideState.TRACKING
        return True

    def pause(self, now_ms: Optional[int] = None) -> bool:
        if self.state is not RideState.TRACKING:
            return False
        self.pause_ledger.begin_pause(self._now(now_ms))
        self.current_speed_kmh = 0.0
        self.state = RideState.PAUSED
        return True

    def resume(self, now_ms: Optional[int] = None) -> bool:
        if self.state is not RideState.PAUSED:
            return False
        self.pause_ledger.end_pause(self._now(now_ms))
        self.state = RideState.TRACKING
        return True

    def stop(self, now_ms: Optional[int] = None) -> bool:
        if self.state not in (RideState.TRACKING, RideState.PAUSED):
            return False
        # An open pause is closed first so its duration counts.
        if self.state is RideState.PAUSED:
            self.pause_ledger.end_pause(self._now(now_ms))
        self.state = RideState.STOPPED
        self.current_speed_kmh = 0.0
        self.statistics = compute_statistics(self.route, self.pause_ledger.paused_seconds)
        return True

    def on_fix(self, fix: LocationFix) -> bool:
        """Record a fix. Fixes arriving outside TRACKING are dropped."""
        if self.state is not RideState.TRACKING:
            return False
        self.route.append(fix)
        self.current_speed_kmh = mps_to_kmh(fix.speed_mps)
        return True
