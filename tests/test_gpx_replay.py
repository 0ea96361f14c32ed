import pytest

from biketrail.errors import BikeTrailError, LocationPermissionError
from biketrail.ride.geo import distance_km
from biketrail.ride.models import RideState
from biketrail.ride.tracker import RideTracker
from biketrail.sources.gpx_replay import GpxReplaySource, replay_ride

# Sample fixes sit every 0.001 degrees of longitude along 37N
HOP_KM = distance_km(37.0, -122.0, 37.0, -121.999)


def test_source_replays_fixes_until_stopped(sample_gpx_path):
    source = GpxReplaySource(sample_gpx_path)
    assert source.request_permission()
    it = source.subscribe()
    first = next(it)
    assert first.longitude == -122.0
    source.stop()
    assert list(it) == []


def test_replay_without_pauses(sample_gpx_path):
    tracker = RideTracker(GpxReplaySource(sample_gpx_path))
    stats = replay_ride(tracker)

    assert tracker.state is RideState.STOPPED
    assert len(tracker.session.route) == 5
    assert stats.distance_km == pytest.approx(4 * HOP_KM, rel=1e-6)
    assert stats.active_time_hours == pytest.approx(240 / 3600)
    assert stats.paused_seconds == 0


def test_replay_drops_fixes_inside_pause_window(sample_gpx_path):
    tracker = RideTracker(GpxReplaySource(sample_gpx_path))
    stats = replay_ride(tracker, [(100, 170)])

    # The fix at 120.5 s falls inside the pause
    assert [f.longitude for f in tracker.session.route] == [-122.0, -121.999, -121.997, -121.996]
    assert stats.paused_seconds == 70
    assert stats.distance_km == pytest.approx(4 * HOP_KM, rel=1e-3)
    assert stats.active_time_hours == pytest.approx(170 / 3600)


def test_touching_pause_windows_count_as_two_pauses(sample_gpx_path):
    tracker = RideTracker(GpxReplaySource(sample_gpx_path))
    stats = replay_ride(tracker, [(30, 100), (100, 170)])

    assert [f.longitude for f in tracker.session.route] == [-122.0, -121.997, -121.996]
    assert stats.paused_seconds == 140
    assert stats.active_time_hours == pytest.approx(100 / 3600)


def test_pause_open_at_end_is_closed_when_stopping(sample_gpx_path):
    tracker = RideTracker(GpxReplaySource(sample_gpx_path))
    stats = replay_ride(tracker, [(200, 400)])

    assert len(tracker.session.route) == 4
    assert stats.paused_seconds == 200
    # 180 s of wall clock against 200 s paused: distance only
    assert stats.distance_km > 0
    assert stats.average_speed_kmh == 0
    assert stats.active_time_hours == 0


def test_pause_after_last_fix_is_ignored(sample_gpx_path):
    tracker = RideTracker(GpxReplaySource(sample_gpx_path))
    stats = replay_ride(tracker, [(300, 400)])
    assert stats.paused_seconds == 0
    assert len(tracker.session.route) == 5


def test_replay_permission_denied(sample_gpx_path):
    tracker = RideTracker(GpxReplaySource(sample_gpx_path, granted=False))
    with pytest.raises(LocationPermissionError):
        replay_ride(tracker)
    assert tracker.state is RideState.IDLE


def test_replay_refuses_a_ride_in_progress(sample_gpx_path):
    tracker = RideTracker(GpxReplaySource(sample_gpx_path))
    tracker.start()
    with pytest.raises(BikeTrailError):
        replay_ride(tracker)
    assert tracker.state is RideState.TRACKING
    assert len(tracker.session.route) == 0
