#!/usr/bin/env python3
"""BikeTrail command line.

Record rides by replaying GPX tracks through the ride tracker, and browse
the stored ride history:

  biketrail record ride.gpx --pause 1800:2400
  biketrail history --tsv
  biketrail show 3
  biketrail export 3 ride3.gpx
  biketrail achievements
  biketrail profile --set name=Ana --set weight_kg=61

The ride database comes from configuration (see biketrail.config) unless
--db is given.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from biketrail.achievements import RideRecord, evaluate_achievements
from biketrail.config import BikeTrailConfig, load_config
from biketrail.errors import BikeTrailError
from biketrail.formats.gpx import write_route_gpx
from biketrail.report import TSV_HEADER, format_achievement, format_report
from biketrail.ride.tracker import RideTracker
from biketrail.sources.gpx_replay import GpxReplaySource, replay_ride
from biketrail.store.rides import RideStore
from biketrail.util.fzf import fzf_select_paths
from biketrail.util.logging import log


def _pause_window(text: str) -> tuple[int, int]:
    """argparse type for START:END (seconds from the first fix)."""
    try:
        start_s, end_s = (int(part) for part in text.split(":", 1))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected START:END in seconds, got {text!r}")
    if start_s < 0 or end_s <= start_s:
        raise argparse.ArgumentTypeError(f"pause window must satisfy 0 <= START < END, got {text!r}")
    return start_s, end_s


def _store(args: argparse.Namespace, cfg: BikeTrailConfig) -> RideStore:
    db_path = Path(args.db).expanduser() if args.db else cfg.paths.sqlite_path
    return RideStore(db_path)


# ----------------------------
# Commands
# ----------------------------

def _cmd_record(args: argparse.Namespace, cfg: BikeTrailConfig) -> int:
    places = cfg.ride.display_places

    selected = [Path(p).expanduser() for p in args.gpx]
    if not selected:
        gpx_root = cfg.paths.gpx_root
        gpx_files = sorted(gpx_root.rglob("*.gpx"))
        if not gpx_files:
            log(f"No GPX files found under {gpx_root}")
            return 2
        selected = fzf_select_paths(gpx_files, header="Select GPX ride(s) to record:", root=gpx_root)

    store = None if args.no_save else _store(args, cfg)
    if args.tsv:
        print(TSV_HEADER)

    rc = 0
    try:
        for path in selected:
            if not path.is_file():
                log(f"Skipping (not a file): {path}")
                rc = 2
                continue
            tracker = RideTracker(GpxReplaySource(path), sink=store)
            try:
                stats = replay_ride(tracker, args.pause)
            except BikeTrailError as e:
                log(f"ERROR: {path}: {e}")
                rc = 2
                continue

            summary = tracker.summary()
            label = path.name
            if store is not None:
                label = f"{tracker.save()}"
            print(format_report(
                label, stats,
                fixes=len(summary.route),
                started_at_ms=summary.started_at_ms,
                places=places,
                tsv=args.tsv,
            ))
    finally:
        if store is not None:
            store.close()
    return rc


def _cmd_history(args: argparse.Namespace, cfg: BikeTrailConfig) -> int:
    with _store(args, cfg) as store:
        rides = store.list_rides()
    if not rides:
        log("No rides recorded yet.")
        return 0
    if args.tsv:
        print(TSV_HEADER)
    for ride in rides:
        print(format_report(
            str(ride.ride_id), ride.statistics,
            fixes=ride.fix_count,
            started_at_ms=ride.started_at_ms,
            places=cfg.ride.display_places,
            tsv=args.tsv,
        ))
    return 0


def _cmd_show(args: argparse.Namespace, cfg: BikeTrailConfig) -> int:
    with _store(args, cfg) as store:
        ride = store.get_ride(args.ride_id)
    print(format_report(
        f"Ride {ride.ride_id}", ride.statistics,
        fixes=ride.fix_count,
        started_at_ms=ride.started_at_ms,
        places=cfg.ride.display_places,
    ))
    return 0


def _cmd_export(args: argparse.Namespace, cfg: BikeTrailConfig) -> int:
    with _store(args, cfg) as store:
        ride = store.get_ride(args.ride_id)
    out = Path(args.out).expanduser()
    n = write_route_gpx(ride.route, out, name=f"BikeTrail ride {ride.ride_id}")
    log(f"Wrote {n} trackpoint(s) to {out}")
    return 0


def _cmd_delete(args: argparse.Namespace, cfg: BikeTrailConfig) -> int:
    with _store(args, cfg) as store:
        store.delete_ride(args.ride_id)
    log(f"Deleted ride {args.ride_id}")
    return 0


def _cmd_achievements(args: argparse.Namespace, cfg: BikeTrailConfig) -> int:
    with _store(args, cfg) as store:
        rides = store.list_rides()
    records = [RideRecord(statistics=r.statistics, started_at_ms=r.started_at_ms) for r in rides]
    for a in evaluate_achievements(records, early_bird_hour=cfg.ride.early_bird_hour):
        print(format_achievement(a))
    return 0


def _cmd_profile(args: argparse.Namespace, cfg: BikeTrailConfig) -> int:
    with _store(args, cfg) as store:
        profile = store.get_profile()
        if args.set:
            for item in args.set:
                key, sep, value = item.partition("=")
                if not sep:
                    log(f"ERROR: expected KEY=VALUE, got {item!r}")
                    return 2
                try:
                    profile = profile.with_value(key.strip(), value)
                except ValueError as e:
                    log(f"ERROR: {e}")
                    return 2
            store.save_profile(profile)
            log("Profile updated.")

    for name in profile.field_names():
        value = getattr(profile, name)
        print(f"  {name:<18}: {'' if value is None else value}")
    return 0


# ----------------------------
# Entry point
# ----------------------------

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="biketrail", description="BikeTrail: record and review bike rides.")
    ap.add_argument("--db", default=None,
                    help="SQLite ride database (default: from BikeTrail config or ~/BikeTrail/_db/rides.sqlite)")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("record", help="Record ride(s) by replaying GPX tracks.")
    p.add_argument("gpx", nargs="*",
                   help="One or more GPX files. If omitted, pick from the configured gpx_root with fzf.")
    p.add_argument("--pause", action="append", type=_pause_window, default=[], metavar="START:END",
                   help="Pause window in seconds from the first fix (repeatable).")
    p.add_argument("--no-save", action="store_true",
                   help="Print statistics without storing the ride.")
    p.add_argument("--tsv", action="store_true",
                   help="Print tab-separated output (good for piping).")
    p.set_defaults(func=_cmd_record)

    p = sub.add_parser("history", help="List stored rides, newest first.")
    p.add_argument("--tsv", action="store_true",
                   help="Print tab-separated output (good for piping).")
    p.set_defaults(func=_cmd_history)

    p = sub.add_parser("show", help="Show one stored ride.")
    p.add_argument("ride_id", type=int)
    p.set_defaults(func=_cmd_show)

    p = sub.add_parser("export", help="Export a stored ride's route as GPX.")
    p.add_argument("ride_id", type=int)
    p.add_argument("out", help="Output .gpx path")
    p.set_defaults(func=_cmd_export)

    p = sub.add_parser("delete", help="Delete a stored ride.")
    p.add_argument("ride_id", type=int)
    p.set_defaults(func=_cmd_delete)

    p = sub.add_parser("achievements", help="Show achievement progress.")
    p.set_defaults(func=_cmd_achievements)

    p = sub.add_parser("profile", help="Show or update the rider profile.")
    p.add_argument("--set", action="append", default=[], metavar="KEY=VALUE",
                   help="Set a profile field (repeatable).")
    p.set_defaults(func=_cmd_profile)

    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config()
        return args.func(args, cfg)
    except BikeTrailError as e:
        log(f"ERROR: {e}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
