import pytest

from biketrail.errors import BikeTrailError, LocationPermissionError, PersistenceError
from biketrail.ride.models import RideState
from biketrail.ride.tracker import RideTracker
from conftest import fix


class FakeSource:
    def __init__(self, fixes, granted=True):
        self._fixes = list(fixes)
        self.granted = granted
        self.permission_calls = 0
        self.stop_calls = 0

    def request_permission(self):
        self.permission_calls += 1
        return self.granted

    def subscribe(self):
        yield from self._fixes

    def stop(self):
        self.stop_calls += 1


class FakeSink:
    def __init__(self, fail_times=0):
        self.fail_times = fail_times
        self.saved = []

    def save(self, summary):
        if self.fail_times:
            self.fail_times -= 1
            raise PersistenceError("backend unavailable")
        self.saved.append(summary)
        return len(self.saved)


RIDE = [fix(37.0, -122.0, 0, speed=3.0), fix(37.0, -121.991, 3600, speed=4.0)]


def test_permission_denied_keeps_session_idle(capsys):
    tracker = RideTracker(FakeSource(RIDE, granted=False))
    with pytest.raises(LocationPermissionError):
        tracker.start()
    assert tracker.state is RideState.IDLE
    assert "permission" in capsys.readouterr().out


def test_follow_feeds_all_fixes_then_stop_computes_statistics():
    source = FakeSource(RIDE)
    tracker = RideTracker(source)
    tracker.start()
    assert tracker.follow() == 2
    assert tracker.session.current_speed_kmh == pytest.approx(14.4)

    stats = tracker.stop(now_ms=3_600_000)
    assert source.stop_calls == 1
    assert stats.distance_km == pytest.approx(0.80, abs=0.005)
    assert stats.active_time_hours == pytest.approx(1.0)


def test_follow_with_limit_consumes_one_fix_at_a_time():
    tracker = RideTracker(FakeSource(RIDE))
    tracker.start()
    assert tracker.follow(limit=1) == 1
    assert len(tracker.session.route) == 1
    tracker.pause(now_ms=10_000)
    assert tracker.follow() == 0
    assert len(tracker.session.route) == 1


def test_follow_with_zero_limit_consumes_nothing():
    tracker = RideTracker(FakeSource(RIDE))
    tracker.start()
    assert tracker.follow(limit=0) == 0
    assert len(tracker.session.route) == 0
    assert tracker.follow() == 2


def test_start_during_a_ride_is_rejected(capsys):
    source = FakeSource(RIDE)
    tracker = RideTracker(source)
    assert tracker.start()
    tracker.follow(limit=1)

    assert not tracker.start()
    tracker.pause(now_ms=5_000)
    assert not tracker.start()
    assert source.permission_calls == 1
    assert tracker.state is RideState.PAUSED
    assert len(tracker.session.route) == 1
    assert "start ignored" in capsys.readouterr().out


def test_start_after_stop_begins_a_fresh_ride():
    tracker = RideTracker(FakeSource(RIDE))
    tracker.start()
    tracker.follow()
    tracker.stop(now_ms=3_600_000)

    assert tracker.start()
    assert len(tracker.session.route) == 0
    assert tracker.follow() == 2


def test_summary_requires_stopped_ride():
    tracker = RideTracker(FakeSource(RIDE))
    tracker.start()
    with pytest.raises(BikeTrailError):
        tracker.summary()


def test_save_hands_summary_to_sink():
    sink = FakeSink()
    tracker = RideTracker(FakeSource(RIDE), sink=sink)
    tracker.start()
    tracker.follow()
    tracker.stop()

    assert tracker.save() == 1
    summary = sink.saved[0]
    assert summary.route == tuple(RIDE)
    assert summary.started_at_ms == 0
    assert summary.statistics == tracker.session.statistics


def test_failed_save_leaves_session_intact_for_retry():
    sink = FakeSink(fail_times=1)
    tracker = RideTracker(FakeSource(RIDE), sink=sink)
    tracker.start()
    tracker.follow()
    stats = tracker.stop()

    with pytest.raises(PersistenceError):
        tracker.save()
    assert tracker.state is RideState.STOPPED
    assert len(tracker.session.route) == 2
    assert tracker.session.statistics == stats

    assert tracker.save() == 1


def test_save_without_sink_is_an_error():
    tracker = RideTracker(FakeSource(RIDE))
    tracker.start()
    tracker.stop()
    with pytest.raises(BikeTrailError):
        tracker.save()
