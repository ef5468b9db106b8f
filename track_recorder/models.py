"""Data models for position samples and track waypoints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from track_recorder.geo import haversine_m


@dataclass(frozen=True, slots=True)
class Position:
    """A single raw location sample as delivered by the location source.

    Attributes:
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        geo_time_ms: Unix epoch milliseconds. 0 when the source did not report a time.
        altitude_m: Altitude in meters, if reported.
        speed_mps: Speed in meters/second, if reported.
        bearing_deg: Bearing in degrees, if reported.
        horizontal_accuracy_m: Horizontal accuracy radius in meters, if reported.
    """

    latitude: float
    longitude: float
    geo_time_ms: int = 0
    altitude_m: float | None = None
    speed_mps: float | None = None
    bearing_deg: float | None = None
    horizontal_accuracy_m: float | None = None

    @property
    def geo_time_s(self) -> float:
        """Unix epoch seconds as float."""

        return self.geo_time_ms / 1000.0

    def distance_to(self, other: Position) -> float:
        """Great-circle distance to another position in meters."""

        return haversine_m(self.latitude, self.longitude, other.latitude, other.longitude)


@dataclass(frozen=True, slots=True)
class WayPoint:
    """One classified, distance-annotated observation of a track.

    Waypoints are created by ``Track.add_waypoint`` (or restored by the codec) and
    never change afterwards. No validation happens here; the track owns the
    cumulative-distance invariant.
    """

    position: Position
    is_stop_over: bool
    distance_to_start_m: float


DEFAULT_TZ: Final[str] = "Asia/Shanghai"
