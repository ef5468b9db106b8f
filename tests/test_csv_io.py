import csv
import logging

import pytest

from track_recorder.csv_io import export_waypoints_csv, iter_positions, load_positions
from track_recorder.track import build_track

from conftest import START_MS


def test_load_positions_skips_damaged_rows(sample_csv, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="track_recorder.csv_io"):
        positions, summary = load_positions(sample_csv)
    assert summary.rows_total == 5
    assert summary.rows_parsed == 4
    assert summary.rows_skipped == 1
    assert "geoTime" in summary.fieldnames
    assert [p.geo_time_ms for p in positions] == [START_MS, START_MS + 10_000, START_MS + 30_000, START_MS + 3_661_000]
    assert "1 行解析失败" in caplog.text


def test_sentinels_and_blanks_become_none(sample_csv) -> None:
    positions, _ = load_positions(sample_csv)
    first, _, third, _ = positions
    assert first.speed_mps is None
    assert first.bearing_deg is None
    assert first.altitude_m == 12.0
    assert first.horizontal_accuracy_m == 5.0
    assert third.altitude_m is None
    assert third.bearing_deg is None
    assert third.horizontal_accuracy_m is None
    assert third.speed_mps == 0.0


def test_iter_positions_matches_load(sample_csv) -> None:
    positions, _ = load_positions(sample_csv)
    assert list(iter_positions(sample_csv)) == positions


def test_missing_required_column_raises(tmp_path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("geoTime,lat,lon\n1,2,3\n", encoding="utf-8")
    with pytest.raises(KeyError):
        load_positions(path)
    with pytest.raises(KeyError):
        list(iter_positions(path))


def test_empty_file_yields_nothing(tmp_path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")
    positions, summary = load_positions(path)
    assert positions == []
    assert summary.rows_total == 0
    assert list(iter_positions(path)) == []


def test_track_from_sample_csv(sample_csv) -> None:
    positions, _ = load_positions(sample_csv)
    track = build_track(positions)
    assert track.get_size() == 4
    assert track.get_track_distance() == "203m"
    assert track.get_track_duration() == "01:01:01"
    assert [wp.is_stop_over for wp in track.get_waypoints()] == [False, False, True, False]


def test_export_waypoints_csv(sample_csv, tmp_path) -> None:
    positions, _ = load_positions(sample_csv)
    track = build_track(positions)
    out = tmp_path / "waypoints.csv"
    export_waypoints_csv(track, out, "Asia/Shanghai")

    with out.open("r", encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 4
    assert rows[0]["time_local"] == "2025-01-01 08:00:00+08:00"
    assert rows[0]["distance_m"] == "0.000"
    assert rows[2]["stop_over"] == "1"
    assert rows[2]["horizontal_accuracy_m"] == ""
    assert float(rows[-1]["distance_m"]) == pytest.approx(203.0, abs=1e-3)
