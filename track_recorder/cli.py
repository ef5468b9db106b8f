"""Command-line interface for track_recorder.

Run:
    python -m track_recorder summarize --csv Path.csv
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from track_recorder.codec import read_track_json, write_track_json
from track_recorder.csv_io import export_waypoints_csv, load_positions
from track_recorder.errors import TrackError
from track_recorder.models import DEFAULT_TZ
from track_recorder.stopover import DEFAULT_STOP_OVER_POLICY, StopOverPolicy
from track_recorder.timeutils import dt_from_epoch_ms
from track_recorder.track import Track, build_track

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        )


def _policy_from_args(args: argparse.Namespace) -> StopOverPolicy:
    return StopOverPolicy(
        min_movement_m=args.min_movement_m,
        accuracy_factor=args.accuracy_factor,
        max_accuracy_radius_m=args.max_accuracy_radius_m,
    )


def _track_from_csv(args: argparse.Namespace) -> Track:
    positions, summary = load_positions(args.csv)
    logger.info(
        "读取 %s：total_rows=%s, parsed=%s, skipped=%s",
        args.csv,
        summary.rows_total,
        summary.rows_parsed,
        summary.rows_skipped,
    )
    return build_track(positions, policy=_policy_from_args(args))


def _print_summary(track: Track, tz_name: str) -> None:
    print("### 轨迹汇总")
    print(f"waypoints={track.get_size()}, stop_overs={track.stop_over_count()}")
    print(f"distance={track.get_track_distance()}, duration={track.get_track_duration()}")

    stamped = [wp.position.geo_time_ms for wp in track.get_waypoints() if wp.position.geo_time_ms > 0]
    if stamped:
        start = dt_from_epoch_ms(stamped[0], tz_name)
        end = dt_from_epoch_ms(stamped[-1], tz_name)
        print(f"start={start.isoformat(sep=' ')}, end={end.isoformat(sep=' ')}")


def _cmd_summarize(args: argparse.Namespace) -> int:
    track = _track_from_csv(args)
    _print_summary(track, args.tz)

    if args.json:
        payload = {
            "waypoints": track.get_size(),
            "stop_overs": track.stop_over_count(),
            "distance_m": track.total_distance_m,
            "distance": track.get_track_distance(),
            "duration_ms": track.duration_ms,
            "duration": track.get_track_duration(),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_export_waypoints(args: argparse.Namespace) -> int:
    track = _track_from_csv(args)
    export_waypoints_csv(track, args.out, args.tz)
    print(f"已导出：{args.out}（waypoints={track.get_size()}）")
    return 0


def _cmd_dump(args: argparse.Namespace) -> int:
    track = _track_from_csv(args)
    write_track_json(track, args.out)
    print(f"已导出：{args.out}（waypoints={track.get_size()}, distance={track.get_track_distance()}）")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    track = read_track_json(args.track)
    _print_summary(track, args.tz)
    return 0


def _add_policy_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--min-movement-m",
        type=float,
        default=DEFAULT_STOP_OVER_POLICY.min_movement_m,
        help="相邻两点距离不超过该值（米）视为停留（默认10m）",
    )
    p.add_argument(
        "--accuracy-factor",
        type=float,
        default=DEFAULT_STOP_OVER_POLICY.accuracy_factor,
        help="定位精度放大系数：停留半径至少为 系数×两点中较差的精度",
    )
    p.add_argument(
        "--max-accuracy-radius-m",
        type=float,
        default=DEFAULT_STOP_OVER_POLICY.max_accuracy_radius_m,
        help="由定位精度推出的停留半径上限（米，默认50m）",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="track_recorder")
    p.add_argument("-v", "--verbose", action="store_true", help="输出逐点调试日志")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_sum = sub.add_parser("summarize", help="由位置CSV生成轨迹并输出距离/时长/停留点汇总")
    p_sum.add_argument("--csv", type=str, default="Path.csv", help="输入CSV路径")
    p_sum.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA），默认 Asia/Shanghai")
    p_sum.add_argument("--json", action="store_true", help="额外输出JSON（便于后处理）")
    _add_policy_args(p_sum)
    p_sum.set_defaults(func=_cmd_summarize)

    p_exp = sub.add_parser("export-waypoints", help="导出带累计距离与停留标记的航点CSV")
    p_exp.add_argument("--csv", type=str, default="Path.csv", help="输入CSV路径")
    p_exp.add_argument("--out", type=str, default="waypoints.csv", help="输出CSV路径")
    p_exp.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA）")
    _add_policy_args(p_exp)
    p_exp.set_defaults(func=_cmd_export_waypoints)

    p_dump = sub.add_parser("dump", help="生成轨迹并序列化为 track.json")
    p_dump.add_argument("--csv", type=str, default="Path.csv", help="输入CSV路径")
    p_dump.add_argument("--out", type=str, default="track.json", help="输出JSON路径")
    _add_policy_args(p_dump)
    p_dump.set_defaults(func=_cmd_dump)

    p_show = sub.add_parser("show", help="读取 track.json 并输出汇总")
    p_show.add_argument("--track", type=str, default="track.json", help="track.json 路径")
    p_show.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA）")
    p_show.set_defaults(func=_cmd_show)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)
    try:
        return int(args.func(args))
    except FileNotFoundError as exc:
        print(f"找不到文件：{exc.filename!r}", file=sys.stderr)
        return 1
    except (TrackError, KeyError) as exc:
        print(f"错误：{exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
