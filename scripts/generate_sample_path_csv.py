from __future__ import annotations

import argparse
import csv
import math
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Final

from zoneinfo import ZoneInfo


TZ: Final[str] = "Asia/Shanghai"
# 约 111_320 米 / 纬度
METERS_PER_DEG_LAT: Final[float] = 111_320.0


def _epoch_ms(dt: datetime) -> int:
    return int(dt.timestamp() * 1000)


def generate_session(
    *,
    rows: int,
    seed: int,
    start_local: datetime,
    start_lat: float,
    start_lon: float,
) -> list[dict[str, str]]:
    """Generate one fake recording session: walking legs interrupted by pauses."""

    rng = random.Random(seed)
    cur = start_local.replace(tzinfo=ZoneInfo(TZ))
    lat, lon = start_lat, start_lon
    bearing = rng.uniform(0, 360)
    paused_for = 0

    out: list[dict[str, str]] = []
    for _ in range(rows):
        cur = cur + timedelta(seconds=rng.uniform(5, 15))

        if paused_for == 0 and rng.random() < 0.05:
            paused_for = rng.randint(3, 12)

        if paused_for > 0:
            # Standing still: only GPS jitter
            paused_for -= 1
            lat += rng.uniform(-2, 2) / METERS_PER_DEG_LAT
            lon += rng.uniform(-2, 2) / (METERS_PER_DEG_LAT * math.cos(math.radians(lat)))
            speed = 0.0
        else:
            bearing = (bearing + rng.uniform(-25, 25)) % 360
            step_m = rng.uniform(8, 20)
            lat += step_m * math.cos(math.radians(bearing)) / METERS_PER_DEG_LAT
            lon += step_m * math.sin(math.radians(bearing)) / (METERS_PER_DEG_LAT * math.cos(math.radians(lat)))
            speed = rng.uniform(1.0, 1.8)

        hacc = rng.choice([3.0, 5.0, 8.0, 12.0, -1.0])
        out.append(
            {
                "geoTime": str(_epoch_ms(cur)),
                "latitude": f"{lat:.7f}",
                "longitude": f"{lon:.7f}",
                "altitude": f"{rng.uniform(0, 20):.1f}",
                "speed": f"{speed:.1f}",
                "bearing": f"{bearing:.1f}",
                "horizontalAccuracy": f"{hacc:.1f}",
            }
        )
    return out


def main() -> int:
    p = argparse.ArgumentParser(description="Generate a fake Path.csv recording session for demo/testing.")
    p.add_argument("--out", type=str, default="sample_data/Path.csv", help="Output CSV path")
    p.add_argument("--rows", type=int, default=500, help="Number of rows")
    p.add_argument("--seed", type=int, default=42, help="Random seed (reproducible)")
    p.add_argument(
        "--start",
        type=str,
        default="2025-01-01 08:00:00",
        help="Start local time in Asia/Shanghai, e.g. '2025-01-01 08:00:00'",
    )
    args = p.parse_args()

    rows = generate_session(
        rows=args.rows,
        seed=args.seed,
        start_local=datetime.fromisoformat(args.start),
        start_lat=31.2304000,
        start_lon=121.4737000,
    )
    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    fieldnames = ["geoTime", "latitude", "longitude", "altitude", "speed", "bearing", "horizontalAccuracy"]
    with out_path.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames)
        w.writeheader()
        w.writerows(rows)

    print(f"Generated: {out_path} (rows={len(rows)}, seed={args.seed})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
