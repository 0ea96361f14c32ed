"""
BikeTrail configuration loader

This module centralizes *all* configuration handling for BikeTrail.

Design goals:
- Keep the CLI Unix-friendly: flags override everything.
- Provide sensible defaults if no config exists.
- Allow per-machine config without committing personal paths:
    ~/.config/biketrail/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by each command)
2) Environment variables (BIKETRAIL_*)
3) User config: ~/.config/biketrail/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults (~/BikeTrail/... paths)

Example config.toml:

    [paths]
    runtime_root = "~/BikeTrail"
    gpx_root = "~/BikeTrail/gpx"

    [db]
    sqlite_path = "~/BikeTrail/_db/rides.sqlite"

    [ride]
    display_places = 2

    [achievements]
    early_bird_hour = 7
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from biketrail.errors import ConfigError

# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise ConfigError
      with a clear, user-facing message.

    Missing config files are normal; malformed ones indicate user intent
    and fail loudly.
    """
    if not path.is_file():
        return {}

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "paths.runtime_root")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    """
    Coerce a config value into a pathlib.Path if possible.

    Accepted inputs:
    - Path (expanded)
    - string (expanded via ~)

    Returns None if value cannot be interpreted as a path.
    """
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str):
        return Path(v).expanduser()
    return None


def _as_int(v: Any) -> Optional[int]:
    """
    Coerce TOML integers and numeric env strings into int.

    Returns None (meaning "not set") for anything else, including bools.
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return None
    return None


def _env_path(var: str) -> Optional[Path]:
    """
    Read an environment variable and interpret it as a Path.

    Used for automation, CI, and power-user overrides.
    """
    val = os.environ.get(var)
    return Path(val).expanduser() if val else None


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the BikeTrail repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_runtime_root() -> Path:
    """
    Default runtime root if nothing is configured.

    GPX input and the ride database derive from this path
    unless explicitly overridden.
    """
    return Path.home() / "BikeTrail"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class RideConfig:
    """
    Ride display and achievement settings.

    - display_places: decimals shown for distance/time/speed
    - early_bird_hour: rides starting before this local hour count
      toward the Early Bird achievement (clamped to 0..24)
    """

    display_places: int = 2
    early_bird_hour: int = 7


@dataclass(frozen=True)
class BikeTrailPaths:
    """
    Canonical resolved filesystem paths used by BikeTrail.
    """

    runtime_root: Path
    gpx_root: Path
    db_root: Path
    sqlite_path: Path


@dataclass(frozen=True)
class BikeTrailConfig:
    """
    Fully merged BikeTrail configuration.

    Attributes:
    - paths: resolved filesystem layout
    - ride: display and achievement settings
    - source: provenance map showing where each value came from
    """

    paths: BikeTrailPaths
    ride: RideConfig
    source: dict[str, str]


_PATH_KEYS = ("paths.runtime_root", "paths.gpx_root", "paths.db_root", "db.sqlite_path")
_INT_KEYS = ("ride.display_places", "achievements.early_bird_hour")


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> BikeTrailConfig:
    """
    Load, merge, and normalize all BikeTrail configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "biketrail" / "config.toml"

    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    # Defaults; derived paths are filled in at the end if still unset
    runtime_root = default_runtime_root()
    path_values: dict[str, Path] = {}
    int_values: dict[str, int] = {
        "ride.display_places": RideConfig.display_places,
        "achievements.early_bird_hour": RideConfig.early_bird_hour,
    }

    # Track provenance for debugging
    src = {k: "default" for k in _PATH_KEYS + _INT_KEYS}

    # ------------------------------------------------------------------
    # Repo, then user config (user overrides repo)
    # ------------------------------------------------------------------
    for cfg, label, cfg_path in ((repo_cfg, "repo", repo_config_path), (user_cfg, "user", user_config_path)):
        for k in _PATH_KEYS:
            v = _as_path(_deep_get(cfg, k))
            if v is None:
                continue
            path_values[k] = v
            src[k] = f"{label}:{cfg_path}"
        for k in _INT_KEYS:
            n = _as_int(_deep_get(cfg, k))
            if n is None:
                continue
            int_values[k] = n
            src[k] = f"{label}:{cfg_path}"

    # ------------------------------------------------------------------
    # Environment variable overrides (highest non-CLI precedence)
    # ------------------------------------------------------------------
    env_paths = {
        "BIKETRAIL_RUNTIME_ROOT": "paths.runtime_root",
        "BIKETRAIL_GPX_ROOT": "paths.gpx_root",
        "BIKETRAIL_DB_ROOT": "paths.db_root",
        "BIKETRAIL_SQLITE_PATH": "db.sqlite_path",
    }
    for env, key in env_paths.items():
        v = _env_path(env)
        if v is None:
            continue
        path_values[key] = v
        src[key] = f"env:{env}"

    places = _as_int(os.environ.get("BIKETRAIL_DISPLAY_PLACES"))
    if places is not None:
        int_values["ride.display_places"] = places
        src["ride.display_places"] = "env:BIKETRAIL_DISPLAY_PLACES"

    # Derive subfolders from runtime_root where not set explicitly
    runtime_root = path_values.get("paths.runtime_root", runtime_root)
    gpx_root = path_values.get("paths.gpx_root", runtime_root / "gpx")
    db_root = path_values.get("paths.db_root", runtime_root / "_db")
    sqlite_path = path_values.get("db.sqlite_path", db_root / "rides.sqlite")

    paths = BikeTrailPaths(
        runtime_root=runtime_root.expanduser(),
        gpx_root=gpx_root.expanduser(),
        db_root=db_root.expanduser(),
        sqlite_path=sqlite_path.expanduser(),
    )
    ride = RideConfig(
        display_places=max(0, int_values["ride.display_places"]),
        early_bird_hour=min(24, max(0, int_values["achievements.early_bird_hour"])),
    )

    return BikeTrailConfig(paths=paths, ride=ride, source=src)
