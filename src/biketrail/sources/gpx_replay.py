# biketrail/sources/gpx_replay.py
"""
A location source that replays a recorded GPX track.

Stands in for a live device feed: permission is a constructor flag and the
subscription yields the file's fixes in document order until stop().
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, Optional, Sequence

from biketrail.errors import BikeTrailError
from biketrail.formats.gpx import read_fixes
from biketrail.ride.models import LocationFix, RideState, RideStatistics
from biketrail.ride.tracker import RideTracker


class GpxReplaySource:
    def __init__(self, path: Path, *, granted: bool = True) -> None:
        self.path = Path(path)
        self.granted = granted
        self.stopped = False
        self._fixes: Optional[list[LocationFix]] = None

    def request_permission(self) -> bool:
        return self.granted

    @property
    def fixes(self) -> list[LocationFix]:
        """All fixes in the file (parsed once, lazily)."""
        if self._fixes is None:
            self._fixes = read_fixes(self.path)
        return self._fixes

    def subscribe(self) -> Iterator[LocationFix]:
        self.stopped = False
        for fix in self.fixes:
            if self.stopped:
                return
            yield fix

    def stop(self) -> None:
        self.stopped = True


def replay_ride(tracker: RideTracker, pauses: Sequence[tuple[int, int]] = ()) -> RideStatistics:
    """
    Run one complete ride through `tracker`: start, feed every fix, stop.

    `pauses` are (start_s, end_s) windows in seconds from the first fix.
    Pause/resume events are applied in time order before the first fix at or
    after them, so fixes inside a window are dropped by the session. A window
    still open after the last fix is closed at its end when the ride stops;
    windows starting after the last fix are ignored. Windows that touch
    (one ends where the next starts) count as two pauses.

    Raises:
      LocationPermissionError if the source refuses permission.
      BikeTrailError if `tracker` already has a ride in progress.
    """
    if not tracker.start():
        raise BikeTrailError(f"cannot replay into a {tracker.state.value} ride")

    events: list[tuple[int, str]] = []
    last_ms: Optional[int] = None
    for fix in tracker.fixes():
        if last_ms is None:
            t0 = fix.timestamp_ms
            for start_s, end_s in pauses:
                events.append((t0 + start_s * 1000, "pause"))
                events.append((t0 + end_s * 1000, "resume"))
            # A resume sorts ahead of a pause at the same instant so touching
            # windows stay two pauses.
            events.sort(key=lambda e: (e[0], e[1] != "resume"))
        while events and events[0][0] <= fix.timestamp_ms:
            at_ms, action = events.pop(0)
            if action == "pause":
                tracker.pause(at_ms)
            else:
                tracker.resume(at_ms)
        tracker.handle(fix)
        last_ms = fix.timestamp_ms

    stop_ms = last_ms
    if tracker.state is RideState.PAUSED:
        pending = [at_ms for at_ms, action in events if action == "resume"]
        if pending:
            stop_ms = pending[0]
    return tracker.stop(stop_ms)
