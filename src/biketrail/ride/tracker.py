# biketrail/ride/tracker.py
"""
Ride tracker: one controller per active ride.

Wires a RideSession to its external collaborators:
  - a LocationSource that grants permission and yields fixes
  - an optional PersistenceSink that stores finished rides

Fixes are pulled from the source subscription and pushed into the session
one at a time; nothing here runs concurrently.
"""

from __future__ import annotations

from typing import Iterator, Optional, Protocol

from biketrail.errors import BikeTrailError, LocationPermissionError
from biketrail.ride.models import LocationFix, RideState, RideStatistics, RideSummary
from biketrail.ride.session import RideSession
from biketrail.util.logging import log


class LocationSource(Protocol):
    def request_permission(self) -> bool: ...

    def subscribe(self) -> Iterator[LocationFix]: ...

    def stop(self) -> None: ...


class PersistenceSink(Protocol):
    def save(self, summary: RideSummary) -> int:
        """Store a finished ride and return its id. Raises PersistenceError."""
        ...


class RideTracker:
    def __init__(
        self,
        source: LocationSource,
        sink: Optional[PersistenceSink] = None,
        session: Optional[RideSession] = None,
    ) -> None:
        self.source = source
        self.sink = sink
        self.session = session if session is not None else RideSession()
        self._fixes: Optional[Iterator[LocationFix]] = None

    @property
    def state(self) -> RideState:
        return self.session.state

    def start(self) -> bool:
        """
        Begin a new ride. Returns False (without asking the source for
        permission) while a ride is already tracking or paused.

        Raises:
          LocationPermissionError if the source refuses; the session stays
          in its current state.
        """
        if self.session.state in (RideState.TRACKING, RideState.PAUSED):
            log(f"Ride already {self.session.state.value}; start ignored")
            return False
        if not self.source.request_permission():
            log("Location permission not granted")
            raise LocationPermissionError("location permission denied")
        self._fixes = None
        return self.session.start()

    def handle(self, fix: LocationFix) -> bool:
        return self.session.on_fix(fix)

    def fixes(self) -> Iterator[LocationFix]:
        """The source subscription, opened on first use."""
        if self._fixes is None:
            self._fixes = iter(self.source.subscribe())
        return self._fixes

    def follow(self, limit: Optional[int] = None) -> int:
        """
        Feed up to `limit` fixes (all when None) from the source into the
        session. Returns the number of fixes accepted.
        """
        accepted = 0
        if limit is not None and limit <= 0:
            return accepted
        for n, fix in enumerate(self.fixes(), start=1):
            if self.handle(fix):
                accepted += 1
            if limit is not None and n >= limit:
                break
        return accepted

    def pause(self, now_ms: Optional[int] = None) -> bool:
        return self.session.pause(now_ms)

    def resume(self, now_ms: Optional[int] = None) -> bool:
        return self.session.resume(now_ms)

    def stop(self, now_ms: Optional[int] = None) -> RideStatistics:
        if self.session.stop(now_ms):
            self.source.stop()
            self._fixes = None
        return self.session.statistics

    def summary(self) -> RideSummary:
        if self.session.state is not RideState.STOPPED:
            raise BikeTrailError(f"ride is {self.session.state.value}, not stopped")
        return RideSummary(
            route=self.session.route.snapshot(),
            statistics=self.session.statistics,
        )

    def save(self) -> int:
        """
        Hand the stopped ride to the sink and return its id.

        PersistenceError propagates unchanged and the session is left intact,
        so the caller may retry.
        """
        if self.sink is None:
            raise BikeTrailError("no persistence sink configured")
        ride_id = self.sink.save(self.summary())
        log(f"Saved ride {ride_id} ({len(self.session.route)} fixes)")
        return ride_id
