from pathlib import Path

import pytest

from biketrail.config import load_config
from biketrail.errors import ConfigError

ENV_VARS = [
    "BIKETRAIL_RUNTIME_ROOT",
    "BIKETRAIL_GPX_ROOT",
    "BIKETRAIL_DB_ROOT",
    "BIKETRAIL_SQLITE_PATH",
    "BIKETRAIL_DISPLAY_PLACES",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


def _load(tmp_path: Path, repo_toml: str = "", user_toml: str = ""):
    repo = tmp_path / "repo.toml"
    user = tmp_path / "user.toml"
    if repo_toml:
        repo.write_text(repo_toml, encoding="utf-8")
    if user_toml:
        user.write_text(user_toml, encoding="utf-8")
    return load_config(repo_root=tmp_path, repo_config_path=repo, user_config_path=user)


def test_defaults(tmp_path: Path):
    cfg = _load(tmp_path)
    root = tmp_path / "home" / "BikeTrail"
    assert cfg.paths.runtime_root == root
    assert cfg.paths.gpx_root == root / "gpx"
    assert cfg.paths.sqlite_path == root / "_db" / "rides.sqlite"
    assert cfg.ride.display_places == 2
    assert cfg.ride.early_bird_hour == 7
    assert set(cfg.source.values()) == {"default"}


def test_user_overrides_repo_and_derives_subpaths(tmp_path: Path):
    cfg = _load(
        tmp_path,
        repo_toml='[paths]\nruntime_root = "/srv/rides"\n[ride]\ndisplay_places = 3\n',
        user_toml='[ride]\ndisplay_places = 1\n[achievements]\nearly_bird_hour = 6\n',
    )
    assert cfg.paths.runtime_root == Path("/srv/rides")
    assert cfg.paths.sqlite_path == Path("/srv/rides/_db/rides.sqlite")
    assert cfg.ride.display_places == 1
    assert cfg.ride.early_bird_hour == 6
    assert cfg.source["paths.runtime_root"].startswith("repo:")
    assert cfg.source["ride.display_places"].startswith("user:")


def test_env_overrides_files(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("BIKETRAIL_SQLITE_PATH", "/tmp/other.sqlite")
    monkeypatch.setenv("BIKETRAIL_DISPLAY_PLACES", "4")
    cfg = _load(tmp_path, user_toml='[db]\nsqlite_path = "/data/rides.sqlite"\n')
    assert cfg.paths.sqlite_path == Path("/tmp/other.sqlite")
    assert cfg.ride.display_places == 4
    assert cfg.source["db.sqlite_path"] == "env:BIKETRAIL_SQLITE_PATH"


@pytest.mark.parametrize("raw, expected", [(-3, 0), (25, 24), (5, 5)])
def test_early_bird_hour_is_clamped_to_a_day(tmp_path: Path, raw, expected):
    cfg = _load(tmp_path, user_toml=f"[achievements]\nearly_bird_hour = {raw}\n")
    assert cfg.ride.early_bird_hour == expected


def test_invalid_toml_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        _load(tmp_path, user_toml="[ride\n")
