# biketrail/formats/gpx.py
"""
GPX helpers for BikeTrail

This module is intentionally format-focused:
- GPX namespace handling
- reading trackpoints as LocationFix values
- writing a recorded route back out as a GPX 1.1 track

Key design principle:
  Keep orchestration (ride state, storage, user interaction) elsewhere,
  separate from GPX parsing and serialization (here).
"""

from __future__ import annotations

import datetime as _dt
from pathlib import Path
from typing import Iterable, Optional
from xml.etree import ElementTree as ET

from biketrail.errors import InvalidGpxError
from biketrail.ride.models import LocationFix

# GPX 1.1 default namespace, plus Garmin's trackpoint extension for speed
GPX_NS = {
    "gpx": "http://www.topografix.com/GPX/1/1",
    "tpx": "http://www.garmin.com/xmlschemas/TrackPointExtension/v2",
}

def qn(tag: str) -> str:
    """
    Build an ElementTree-qualified name for a GPX tag.

    ElementTree represents namespaced tags internally as
      "{namespace-uri}tag"
    """
    return f"{{{GPX_NS['gpx']}}}{tag}"


def _parse_gpx_time(text: str) -> Optional[_dt.datetime]:
    """
    Parse an ISO-8601 timestamp commonly found in GPX <time> nodes.

    Expected examples:
      - "2026-01-02T21:14:44Z"
      - "2026-01-02T21:14:44.123Z"
      - "2026-01-02T21:14:44+00:00"
    """
    if not text:
        return None
    s = text.strip()
    if not s:
        return None

    if s.endswith("Z"):
        s = s[:-1] + "+00:00"

    try:
        dt = _dt.datetime.fromisoformat(s)
    except ValueError:
        return None

    # Naive times are taken as UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_dt.timezone.utc)

    return dt.astimezone(_dt.timezone.utc)


def _format_gpx_time(epoch_ms: int) -> str:
    """
    Format epoch milliseconds as GPX time (UTC with Z).
    """
    dt_utc = _dt.datetime.fromtimestamp(epoch_ms / 1000.0, _dt.timezone.utc)
    if dt_utc.microsecond:
        return dt_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return dt_utc.isoformat().replace("+00:00", "Z")


def _indent(elem: ET.Element, level: int = 0, indent: str = "  ") -> None:
    """
    In-place pretty-printer for ElementTree output. Eliminates double blank-line
    issues by explicitly controlling .text/.tail.
    """
    i = "\n" + level * indent
    j = "\n" + (level - 1) * indent if level > 0 else "\n"

    children = list(elem)
    if children:
        if elem.text is None or not elem.text.strip():
            elem.text = i + indent
        for child in children:
            _indent(child, level + 1, indent=indent)
        if children[-1].tail is None or not children[-1].tail.strip():
            children[-1].tail = i
    if elem.tail is None or not elem.tail.strip():
        elem.tail = j


def _speed_of(trkpt: ET.Element) -> Optional[float]:
    """
    Reported speed (m/s) for a trackpoint, if present.

    Looks for a plain <speed> child first (GPX 1.0 style, written by many
    phone apps), then Garmin's TrackPointExtension.
    """
    text = trkpt.findtext("gpx:speed", namespaces=GPX_NS)
    if text is None:
        text = trkpt.findtext("gpx:extensions/tpx:TrackPointExtension/tpx:speed", namespaces=GPX_NS)
    if text is None or not text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def read_fixes(path: Path) -> list[LocationFix]:
    """
    Extract ordered fixes from a GPX file.

    Trackpoints without a parseable <time> are skipped.

    Raises:
      InvalidGpxError if the file cannot be read or parsed.
    """
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        raise InvalidGpxError(f"Could not read GPX {path}: {e}") from e

    fixes: list[LocationFix] = []
    for trkpt in root.findall(".//gpx:trkpt", GPX_NS):
        try:
            lat = float(trkpt.get("lat"))
            lon = float(trkpt.get("lon"))
        except (TypeError, ValueError) as e:
            raise InvalidGpxError(f"Bad trkpt coordinates in {path}: {trkpt.attrib}") from e

        t = _parse_gpx_time(trkpt.findtext("gpx:time", default="", namespaces=GPX_NS))
        if t is None:
            continue   # skip points without timestamps

        fixes.append(
            LocationFix(
                latitude=lat,
                longitude=lon,
                timestamp_ms=round(t.timestamp() * 1000),
                speed_mps=_speed_of(trkpt),
            )
        )

    return fixes


def write_route_gpx(
        fixes: Iterable[LocationFix], out_path: Path, *,
        name: Optional[str] = None,
        pretty: bool = True,
) -> int:
    """
    Write fixes as a single-segment GPX 1.1 track.

    - <metadata><time> is the first fix time
    - reported speeds are kept in a <speed> child

    Returns the number of trackpoints written.
    """
    ET.register_namespace("", GPX_NS["gpx"])
    root = ET.Element(qn("gpx"), {"version": "1.1", "creator": "BikeTrail"})
    md = ET.SubElement(root, qn("metadata"))
    trk = ET.SubElement(root, qn("trk"))
    if name:
        ET.SubElement(md, qn("name")).text = name
        ET.SubElement(trk, qn("name")).text = name
    seg = ET.SubElement(trk, qn("trkseg"))

    count = 0
    for fix in fixes:
        if count == 0:
            ET.SubElement(md, qn("time")).text = _format_gpx_time(fix.timestamp_ms)
        pt = ET.SubElement(seg, qn("trkpt"), {"lat": repr(fix.latitude), "lon": repr(fix.longitude)})
        ET.SubElement(pt, qn("time")).text = _format_gpx_time(fix.timestamp_ms)
        if fix.speed_mps is not None:
            ET.SubElement(pt, qn("speed")).text = repr(fix.speed_mps)
        count += 1

    if pretty:
        _indent(root)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    ET.ElementTree(root).write(out_path, encoding="utf-8", xml_declaration=True)
    return count
