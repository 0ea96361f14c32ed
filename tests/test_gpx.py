import datetime as dt
from pathlib import Path

import pytest

from biketrail.errors import InvalidGpxError
from biketrail.formats.gpx import read_fixes, write_route_gpx
from conftest import fix

T0_MS = int(dt.datetime(2026, 1, 2, 6, 30, tzinfo=dt.timezone.utc).timestamp() * 1000)


def test_read_sample_fixes(sample_gpx_path):
    fixes = read_fixes(sample_gpx_path)

    # The trackpoint without <time> is skipped
    assert len(fixes) == 5
    assert [f.timestamp_ms - T0_MS for f in fixes] == [0, 60_000, 120_500, 180_000, 240_000]
    assert [f.longitude for f in fixes] == [-122.0, -121.999, -121.998, -121.997, -121.996]
    assert [f.speed_mps for f in fixes] == [1.5, 1.48, 1.52, None, 1.49]


def test_write_then_read_route(tmp_path: Path):
    route = [fix(37.0, -122.0, 1_767_335_400), fix(37.0005, -121.9995, 1_767_335_430.25, speed=2.0)]
    out = tmp_path / "out" / "ride.gpx"

    assert write_route_gpx(route, out, name="Test ride") == 2
    text = out.read_text(encoding="utf-8")
    assert "<name>Test ride</name>" in text
    assert "2026-01-02T06:30:30.250Z" in text

    assert read_fixes(out) == route


def test_write_empty_route(tmp_path: Path):
    out = tmp_path / "empty.gpx"
    assert write_route_gpx([], out) == 0
    assert read_fixes(out) == []


def test_unparseable_gpx_raises(tmp_path: Path):
    bad = tmp_path / "bad.gpx"
    bad.write_text("<gpx><trk>", encoding="utf-8")
    with pytest.raises(InvalidGpxError):
        read_fixes(bad)


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(InvalidGpxError):
        read_fixes(tmp_path / "nope.gpx")
