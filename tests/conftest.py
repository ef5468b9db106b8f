"""Global pytest fixtures & helpers.

Adds project root to path and provides position factories shared by the
track, codec and CLI tests.
"""
from __future__ import annotations

import math
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from track_recorder.geo import EARTH_RADIUS_M
from track_recorder.models import Position

# Length of one degree of latitude on the haversine sphere.
METERS_PER_DEG_LAT = EARTH_RADIUS_M * math.pi / 180.0

START_LAT = 31.2304
START_LON = 121.4737
START_MS = 1_735_689_600_000  # 2025-01-01 08:00:00 Asia/Shanghai


def north_of(pos: Position, meters: float, *, seconds: float = 10.0, accuracy: float | None = None) -> Position:
    """A position ``meters`` due north of ``pos``, ``seconds`` later."""

    return Position(
        latitude=pos.latitude + meters / METERS_PER_DEG_LAT,
        longitude=pos.longitude,
        geo_time_ms=pos.geo_time_ms + int(seconds * 1000),
        horizontal_accuracy_m=accuracy,
    )


def walk(steps_m: list[float], *, accuracy: float | None = None) -> list[Position]:
    """A straight walk north starting at the default start point."""

    cur = Position(latitude=START_LAT, longitude=START_LON, geo_time_ms=START_MS, horizontal_accuracy_m=accuracy)
    out = [cur]
    for step in steps_m:
        cur = north_of(cur, step, accuracy=accuracy)
        out.append(cur)
    return out


@pytest.fixture
def start() -> Position:
    return Position(latitude=START_LAT, longitude=START_LON, geo_time_ms=START_MS)


@pytest.fixture
def sample_csv(tmp_path):
    """Exported location CSV with one damaged row and -1 sentinels."""

    rows = [
        "geoTime,latitude,longitude,altitude,speed,bearing,horizontalAccuracy",
        f"{START_MS},{START_LAT},{START_LON},12.0,-1,-1,5.0",
        f"{START_MS + 10_000},{START_LAT + 100 / METERS_PER_DEG_LAT},{START_LON},12.5,1.2,0.0,5.0",
        f"{START_MS + 20_000},not-a-number,{START_LON},12.5,1.2,0.0,5.0",
        f"{START_MS + 30_000},{START_LAT + 103 / METERS_PER_DEG_LAT},{START_LON},,0.0,,-1",
        f"{START_MS + 3_661_000},{START_LAT + 203 / METERS_PER_DEG_LAT},{START_LON},13.0,1.4,0.0,8.0",
    ]
    path = tmp_path / "Path.csv"
    path.write_text("\n".join(rows) + "\n", encoding="utf-8")
    return path
