"""Flatten / restore tracks so a recording can cross process or storage boundaries.

Two forms are provided:

- A flat, ordered list of primitives (``flatten_track`` / ``restore_track``)::

      [FORMAT_VERSION, n, <n waypoint records>..., total_distance_m, duration_ms]

  where every waypoint record is the fields listed in ``WAYPOINT_FIELDS``.
  ``duration_ms`` is None while the track is still recording.

- A keyed dict for JSON (``track_to_dict`` / ``track_from_dict``), plus file helpers.

Restoring yields the same ordered waypoints, stop-over flags and total distance.
Waypoints are taken as stored; they are not reclassified.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Final, Sequence

from track_recorder.errors import TrackDecodeError
from track_recorder.models import Position, WayPoint
from track_recorder.stopover import StopOverPolicy
from track_recorder.track import Track

FORMAT_VERSION: Final[int] = 1

WAYPOINT_FIELDS: Final[tuple[str, ...]] = (
    "geo_time_ms",
    "latitude",
    "longitude",
    "altitude_m",
    "speed_mps",
    "bearing_deg",
    "horizontal_accuracy_m",
    "is_stop_over",
    "distance_to_start_m",
)

_OPTIONAL_FLOATS: Final[tuple[str, ...]] = ("altitude_m", "speed_mps", "bearing_deg", "horizontal_accuracy_m")


def _waypoint_record(wp: WayPoint) -> list[Any]:
    pos = wp.position
    return [
        pos.geo_time_ms,
        pos.latitude,
        pos.longitude,
        pos.altitude_m,
        pos.speed_mps,
        pos.bearing_deg,
        pos.horizontal_accuracy_m,
        wp.is_stop_over,
        wp.distance_to_start_m,
    ]


def _as_float(value: Any, name: str) -> float:
    # bool 是 int 的子类，这里要排除
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TrackDecodeError(f"{name}: expected a number, got {value!r}")
    return float(value)


def _as_optional_float(value: Any, name: str) -> float | None:
    if value is None:
        return None
    return _as_float(value, name)


def _as_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TrackDecodeError(f"{name}: expected an integer, got {value!r}")
    return value


def _as_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise TrackDecodeError(f"{name}: expected a boolean, got {value!r}")
    return value


def _waypoint_from_record(record: Sequence[Any], index: int) -> WayPoint:
    fields = dict(zip(WAYPOINT_FIELDS, record))
    prefix = f"waypoint[{index}]"
    position = Position(
        latitude=_as_float(fields["latitude"], f"{prefix}.latitude"),
        longitude=_as_float(fields["longitude"], f"{prefix}.longitude"),
        geo_time_ms=_as_int(fields["geo_time_ms"], f"{prefix}.geo_time_ms"),
        **{name: _as_optional_float(fields[name], f"{prefix}.{name}") for name in _OPTIONAL_FLOATS},
    )
    return WayPoint(
        position=position,
        is_stop_over=_as_bool(fields["is_stop_over"], f"{prefix}.is_stop_over"),
        distance_to_start_m=_as_float(fields["distance_to_start_m"], f"{prefix}.distance_to_start_m"),
    )


def _build(
    waypoints: list[WayPoint],
    total_distance_m: float,
    duration_ms: int | None,
    policy: StopOverPolicy | None,
) -> Track:
    last = waypoints[-1].distance_to_start_m if waypoints else 0.0
    if not (last == total_distance_m or math.isclose(last, total_distance_m, rel_tol=1e-9, abs_tol=1e-6)):
        raise TrackDecodeError(
            f"total_distance_m {total_distance_m!r} does not match last waypoint distance {last!r}"
        )
    return Track.from_waypoints(waypoints, duration_ms, policy=policy)


def flatten_track(track: Track) -> list[Any]:
    """Flatten a track into an ordered list of primitive values."""

    flat: list[Any] = [FORMAT_VERSION, track.get_size()]
    for wp in track.get_waypoints():
        flat.extend(_waypoint_record(wp))
    flat.append(track.total_distance_m)
    flat.append(track.duration_ms if track.is_finalized else None)
    return flat


def restore_track(flat: Sequence[Any], policy: StopOverPolicy | None = None) -> Track:
    """Rebuild a track from the output of :func:`flatten_track`.

    Args:
        flat: Ordered primitive values.
        policy: Stop-over policy for waypoints appended after restoring.

    Raises:
        TrackDecodeError: If the sequence is truncated, has a different version
            contains values of the wrong type, or stores a total distance that
            disagrees with the last waypoint.
    """

    if isinstance(flat, (str, bytes)) or len(flat) < 4:
        raise TrackDecodeError("flattened track is too short")
    version = _as_int(flat[0], "version")
    if version != FORMAT_VERSION:
        raise TrackDecodeError(f"unsupported track format version {version}")
    count = _as_int(flat[1], "count")
    width = len(WAYPOINT_FIELDS)
    expected = 2 + count * width + 2
    if count < 0 or len(flat) != expected:
        raise TrackDecodeError(f"flattened track has {len(flat)} values, expected {expected} for {count} waypoints")

    waypoints = [
        _waypoint_from_record(flat[2 + i * width : 2 + (i + 1) * width], i) for i in range(count)
    ]
    total = _as_float(flat[-2], "total_distance_m")
    duration = None if flat[-1] is None else _as_int(flat[-1], "duration_ms")
    return _build(waypoints, total, duration, policy)


def track_to_dict(track: Track) -> dict[str, Any]:
    """Keyed, JSON-friendly representation of a track."""

    return {
        "version": FORMAT_VERSION,
        "total_distance_m": track.total_distance_m,
        "duration_ms": track.duration_ms if track.is_finalized else None,
        "waypoints": [dict(zip(WAYPOINT_FIELDS, _waypoint_record(wp))) for wp in track.get_waypoints()],
    }


def track_from_dict(data: dict[str, Any], policy: StopOverPolicy | None = None) -> Track:
    """Inverse of :func:`track_to_dict`.

    Raises:
        TrackDecodeError: If required keys are missing or values are malformed.
    """

    if not isinstance(data, dict):
        raise TrackDecodeError(f"expected a JSON object, got {type(data).__name__}")
    try:
        version = _as_int(data["version"], "version")
        if version != FORMAT_VERSION:
            raise TrackDecodeError(f"unsupported track format version {version}")
        raw_waypoints = data["waypoints"]
        if not isinstance(raw_waypoints, list):
            raise TrackDecodeError("waypoints: expected a list")
        waypoints = []
        for i, raw in enumerate(raw_waypoints):
            if not isinstance(raw, dict):
                raise TrackDecodeError(f"waypoint[{i}]: expected an object")
            waypoints.append(_waypoint_from_record([raw[name] for name in WAYPOINT_FIELDS], i))
        total = _as_float(data["total_distance_m"], "total_distance_m")
        raw_duration = data.get("duration_ms")
        duration = None if raw_duration is None else _as_int(raw_duration, "duration_ms")
    except KeyError as exc:
        raise TrackDecodeError(f"missing field {exc}") from exc
    return _build(waypoints, total, duration, policy)


def write_track_json(track: Track, out_path: str | Path) -> None:
    """Write a track to a JSON file."""

    p = Path(out_path)
    p.write_text(json.dumps(track_to_dict(track), ensure_ascii=False, indent=2), encoding="utf-8")


def read_track_json(path: str | Path, policy: StopOverPolicy | None = None) -> Track:
    """Read a track written by :func:`write_track_json`.

    Raises:
        TrackDecodeError: If the file is not valid JSON or not a track.
    """

    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TrackDecodeError(f"invalid JSON in {str(path)!r}: {exc}") from exc
    return track_from_dict(data, policy=policy)
