# biketrail/store/rides.py
"""
SQLite ride history and rider profile.

RideStore is the persistence sink for finished rides:

  store = RideStore(cfg.paths.sqlite_path)
  ride_id = store.save(tracker.summary())

Every sqlite3 failure is re-raised as PersistenceError; nothing is retried
here. The schema is created on first connect.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from biketrail.errors import PersistenceError, RideNotFoundError
from biketrail.profile import RiderProfile
from biketrail.ride.models import LocationFix, RideStatistics, RideSummary
from biketrail.util.logging import utc_now_iso

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS rides (
    ride_id            INTEGER PRIMARY KEY AUTOINCREMENT,
    started_at_ms      INTEGER,
    saved_utc          TEXT NOT NULL,
    distance_km        REAL NOT NULL,
    average_speed_kmh  REAL NOT NULL,
    active_time_hours  REAL NOT NULL,
    paused_seconds     INTEGER NOT NULL,
    fix_count          INTEGER NOT NULL,
    route_json         TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_rides_started ON rides (started_at_ms);

CREATE TABLE IF NOT EXISTS profiles (
    profile_id         INTEGER PRIMARY KEY CHECK (profile_id = 1),
    name               TEXT NOT NULL DEFAULT '',
    age                INTEGER,
    weight_kg          REAL,
    height_cm          REAL,
    blood_type         TEXT NOT NULL DEFAULT '',
    emergency_contact  TEXT NOT NULL DEFAULT '',
    emergency_phone    TEXT NOT NULL DEFAULT '',
    updated_utc        TEXT NOT NULL
);
"""


@dataclass(frozen=True)
class StoredRide:
    ride_id: int
    started_at_ms: Optional[int]
    saved_utc: str
    statistics: RideStatistics
    fix_count: int
    route: tuple[LocationFix, ...] = ()


def _ride_from_row(row: sqlite3.Row, *, with_route: bool) -> StoredRide:
    route: tuple[LocationFix, ...] = ()
    if with_route:
        route = tuple(LocationFix.from_dict(d) for d in json.loads(row["route_json"]))
    return StoredRide(
        ride_id=int(row["ride_id"]),
        started_at_ms=row["started_at_ms"],
        saved_utc=row["saved_utc"],
        statistics=RideStatistics(
            distance_km=row["distance_km"],
            average_speed_kmh=row["average_speed_kmh"],
            active_time_hours=row["active_time_hours"],
            paused_seconds=row["paused_seconds"],
        ),
        fix_count=int(row["fix_count"]),
        route=route,
    )


class RideStore:
    def __init__(self, db_path: Path) -> None:
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(str(self.db_path))
                conn.row_factory = sqlite3.Row
                conn.executescript(SCHEMA_SQL)
            except (sqlite3.Error, OSError) as e:
                raise PersistenceError(f"Could not open ride database {self.db_path}: {e}") from e
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "RideStore":
        self.connect()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Run one write statement in its own transaction."""
        conn = self.connect()
        try:
            with conn:
                return conn.execute(sql, params)
        except sqlite3.Error as e:
            raise PersistenceError(f"{self.db_path}: {e}") from e

    def _query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        conn = self.connect()
        try:
            return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"{self.db_path}: {e}") from e

    # ------------------------------------------------------------------
    # Rides
    # ------------------------------------------------------------------
    def save(self, summary: RideSummary) -> int:
        """Store a finished ride (full-precision statistics) and return its id."""
        stats = summary.statistics
        cur = self._execute(
            """INSERT INTO rides (
                   started_at_ms, saved_utc, distance_km, average_speed_kmh,
                   active_time_hours, paused_seconds, fix_count, route_json
                 ) VALUES (?,?,?,?,?,?,?,?)""",
            (
                summary.started_at_ms,
                utc_now_iso(),
                stats.distance_km,
                stats.average_speed_kmh,
                stats.active_time_hours,
                stats.paused_seconds,
                len(summary.route),
                json.dumps([fix.to_dict() for fix in summary.route]),
            ),
        )
        return int(cur.lastrowid)

    def list_rides(self) -> list[StoredRide]:
        """All rides, newest first (by start time, then id)."""
        rows = self._query(
            """SELECT ride_id, started_at_ms, saved_utc, distance_km, average_speed_kmh,
                      active_time_hours, paused_seconds, fix_count
                 FROM rides
                 ORDER BY started_at_ms DESC, ride_id DESC"""
        )
        return [_ride_from_row(r, with_route=False) for r in rows]

    def get_ride(self, ride_id: int) -> StoredRide:
        rows = self._query("SELECT * FROM rides WHERE ride_id = ?", (ride_id,))
        if not rows:
            raise RideNotFoundError(f"No ride with id {ride_id}")
        return _ride_from_row(rows[0], with_route=True)

    def delete_ride(self, ride_id: int) -> None:
        cur = self._execute("DELETE FROM rides WHERE ride_id = ?", (ride_id,))
        if cur.rowcount == 0:
            raise RideNotFoundError(f"No ride with id {ride_id}")

    # ------------------------------------------------------------------
    # Profile (single row)
    # ------------------------------------------------------------------
    def get_profile(self) -> RiderProfile:
        rows = self._query("SELECT * FROM profiles WHERE profile_id = 1")
        if not rows:
            return RiderProfile()
        return RiderProfile(**{k: rows[0][k] for k in RiderProfile.field_names()})

    def save_profile(self, profile: RiderProfile) -> None:
        values = asdict(profile)
        cols = RiderProfile.field_names()
        updates = ", ".join(f"{c} = excluded.{c}" for c in cols)
        self._execute(
            f"""INSERT INTO profiles (profile_id, {", ".join(cols)}, updated_utc)
                  VALUES (1, {", ".join("?" for _ in cols)}, ?)
                  ON CONFLICT (profile_id) DO UPDATE SET {updates}, updated_utc = excluded.updated_utc""",
            tuple(values[c] for c in cols) + (utc_now_iso(),),
        )
