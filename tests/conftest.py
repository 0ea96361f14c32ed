from pathlib import Path
import pytest

from biketrail.ride.models import LocationFix
from biketrail.store.rides import RideStore


@pytest.fixture
def sample_gpx_path() -> Path:
    return Path(__file__).parent / "data" / "sample_ride.gpx"


@pytest.fixture
def store(tmp_path: Path):
    with RideStore(tmp_path / "rides.sqlite") as s:
        yield s


def fix(lat: float, lon: float, t_s: float, speed=None) -> LocationFix:
    """Fix at `t_s` seconds after the epoch."""
    return LocationFix(latitude=lat, longitude=lon, timestamp_ms=int(t_s * 1000), speed_mps=speed)
