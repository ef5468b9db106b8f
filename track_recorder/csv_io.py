"""CSV input/output utilities for exported location samples and recorded tracks."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from track_recorder.models import Position
from track_recorder.timeutils import dt_from_epoch_ms
from track_recorder.track import Track

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of CSV parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_int(value: str) -> int:
    return int(value.strip())


def _parse_float(value: str) -> float:
    return float(value.strip())


def _parse_optional(value: str | None) -> float | None:
    """Empty cells and the export's -1 sentinel mean "not reported"."""

    if value is None or not value.strip():
        return None
    v = _parse_float(value)
    if v == -1.0:
        return None
    return v


def _position_from_row(row: dict[str, str]) -> Position:
    return Position(
        geo_time_ms=_parse_int(row["geoTime"]),
        latitude=_parse_float(row["latitude"]),
        longitude=_parse_float(row["longitude"]),
        altitude_m=_parse_optional(row.get("altitude")),
        speed_mps=_parse_optional(row.get("speed")),
        bearing_deg=_parse_optional(row.get("bearing")),
        horizontal_accuracy_m=_parse_optional(row.get("horizontalAccuracy")),
    )


def iter_positions(csv_path: str | Path) -> Iterator[Position]:
    """Yield Position objects from an exported location CSV.

    Args:
        csv_path: Path to the exported CSV.

    Yields:
        Positions parsed successfully, in file order.

    Raises:
        KeyError: If a required column (geoTime/latitude/longitude) is missing.

    Notes:
        Expected columns:
          - geoTime: epoch milliseconds
          - latitude/longitude: decimal degrees
          - altitude/speed/bearing/horizontalAccuracy: optional, -1 means not reported
    """

    p = Path(csv_path)
    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return

        for row in reader:
            try:
                yield _position_from_row(row)
            except KeyError as exc:
                raise KeyError(f"CSV缺少必要字段：{exc}. 实际字段：{reader.fieldnames}") from exc
            except (ValueError, TypeError, AttributeError):
                # 某些行可能损坏/空行，直接跳过
                continue


def load_positions(csv_path: str | Path) -> tuple[list[Position], CsvSummary]:
    """Load all positions into memory.

    Args:
        csv_path: Path to the exported CSV.

    Returns:
        (positions, summary)

    Raises:
        KeyError: If a required column is missing.
    """

    p = Path(csv_path)
    rows_total = 0
    parsed: list[Position] = []
    fieldnames: Sequence[str] = ()

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or ()
        missing = [name for name in ("geoTime", "latitude", "longitude") if name not in fieldnames]
        if fieldnames and missing:
            raise KeyError(f"CSV缺少必要字段：{missing}. 实际字段：{list(fieldnames)}")
        for row in reader:
            rows_total += 1
            try:
                parsed.append(_position_from_row(row))
            except (ValueError, TypeError, AttributeError):
                continue

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("CSV中有 %s 行解析失败已跳过", summary.rows_skipped)
    return parsed, summary


def export_waypoints_csv(track: Track, out_path: str | Path, tz_name: str) -> None:
    """Export a track's waypoints to a human-readable CSV.

    Output columns:
        - index, time_local (empty if the sample had no timestamp), epoch_ms
        - latitude, longitude, horizontal_accuracy_m
        - distance_m: cumulative distance from the first waypoint
        - stop_over: 1 / 0
    """

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(
            f,
            fieldnames=[
                "index",
                "time_local",
                "epoch_ms",
                "latitude",
                "longitude",
                "horizontal_accuracy_m",
                "distance_m",
                "stop_over",
            ],
        )
        w.writeheader()
        for i, wp in enumerate(track.get_waypoints()):
            pos = wp.position
            time_local = ""
            if pos.geo_time_ms > 0:
                time_local = dt_from_epoch_ms(pos.geo_time_ms, tz_name).isoformat(sep=" ")
            w.writerow(
                {
                    "index": i,
                    "time_local": time_local,
                    "epoch_ms": pos.geo_time_ms,
                    "latitude": pos.latitude,
                    "longitude": pos.longitude,
                    "horizontal_accuracy_m": "" if pos.horizontal_accuracy_m is None else pos.horizontal_accuracy_m,
                    "distance_m": f"{wp.distance_to_start_m:.3f}",
                    "stop_over": 1 if wp.is_stop_over else 0,
                }
            )
