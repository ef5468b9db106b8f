"""Track aggregation: waypoints, cumulative distance and summaries."""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from track_recorder.errors import WayPointIndexError
from track_recorder.models import Position, WayPoint
from track_recorder.stopover import DEFAULT_STOP_OVER_POLICY, StopOverPolicy, is_stop_over
from track_recorder.timeutils import format_duration_ms

logger = logging.getLogger(__name__)


class Track:
    """An append-only, chronologically ordered collection of waypoints.

    Each appended position becomes a :class:`WayPoint` carrying the distance
    accumulated since the first waypoint and a stop-over flag relative to its
    predecessor. The duration is supplied by whoever records the session; it is
    not derived from sample timestamps.

    A sample with NaN or infinite coordinates is still appended (and classified
    as moving), but the step to or from it adds no distance, so one broken fix
    cannot turn the rest of the session into an infinite total.

    The track is meant for a single writer. Readers running alongside
    ``add_waypoint`` need their own synchronization.
    """

    def __init__(self, policy: StopOverPolicy | None = None) -> None:
        self._policy = policy if policy is not None else DEFAULT_STOP_OVER_POLICY
        self._waypoints: list[WayPoint] = []
        self._distance_m = 0.0
        self._duration_ms = 0
        self._finalized = False

    @property
    def policy(self) -> StopOverPolicy:
        return self._policy

    @property
    def total_distance_m(self) -> float:
        """Cumulative distance of the last waypoint (0.0 for an empty track)."""

        return self._distance_m

    @property
    def duration_ms(self) -> int:
        return self._duration_ms

    @property
    def is_finalized(self) -> bool:
        """Whether a duration has been set, i.e. recording has stopped."""

        return self._finalized

    def add_waypoint(self, position: Position) -> WayPoint:
        """Append a position sample and return the waypoint created for it.

        Any position is accepted. Identical or wildly distant samples are
        recorded as they are; the stop-over flag only classifies them.

        Args:
            position: The new sample.

        Returns:
            The newly appended waypoint (the same instance held by the track).
        """

        if self._waypoints:
            last = self._waypoints[-1].position
            step_m = last.distance_to(position)
            if math.isfinite(step_m):
                self._distance_m += step_m
            else:
                logger.warning("Non-finite step to lat=%s lon=%s counted as 0m", position.latitude, position.longitude)
            stop_over = is_stop_over(last, position, self._policy)
        else:
            self._distance_m = 0.0
            stop_over = False

        waypoint = WayPoint(position=position, is_stop_over=stop_over, distance_to_start_m=self._distance_m)
        self._waypoints.append(waypoint)

        logger.debug(
            "Waypoint No. %d lat=%.6f lon=%.6f stop_over=%s distance=%.1fm",
            len(self._waypoints) - 1,
            position.latitude,
            position.longitude,
            stop_over,
            self._distance_m,
        )
        return waypoint

    def set_track_duration(self, duration_ms: int) -> None:
        """Store the recording duration, replacing any previous value."""

        self._duration_ms = duration_ms
        self._finalized = True

    def get_track_distance(self) -> str:
        """Total distance as whole meters with unit suffix, e.g. ``"1234m"``.

        An empty track reports ``"0m"``.
        """

        if not self._waypoints:
            return "0m"
        return format_distance_m(self._waypoints[-1].distance_to_start_m)

    def get_track_duration(self) -> str:
        """Recording duration as ``HH:MM:SS``."""

        return format_duration_ms(self._duration_ms)

    def get_size(self) -> int:
        return len(self._waypoints)

    def get_waypoints(self) -> tuple[WayPoint, ...]:
        """All waypoints in chronological order, as a read-only snapshot."""

        return tuple(self._waypoints)

    def get_waypoint_location(self, index: int) -> Position:
        """Return the position of the waypoint at ``index``.

        Raises:
            WayPointIndexError: If ``index`` is not within ``[0, size)``. Negative
                indexes are rejected rather than counted from the end.
        """

        if not 0 <= index < len(self._waypoints):
            raise WayPointIndexError(f"waypoint index {index} out of range for track of size {len(self._waypoints)}")
        return self._waypoints[index].position

    def stop_overs(self) -> list[WayPoint]:
        """Waypoints classified as stop-overs, in order."""

        return [wp for wp in self._waypoints if wp.is_stop_over]

    def stop_over_count(self) -> int:
        return sum(1 for wp in self._waypoints if wp.is_stop_over)

    def __len__(self) -> int:
        return len(self._waypoints)

    def __repr__(self) -> str:
        return (
            f"Track(size={len(self._waypoints)}, distance={self.get_track_distance()}, "
            f"duration={self.get_track_duration()})"
        )

    @classmethod
    def from_waypoints(
        cls,
        waypoints: Iterable[WayPoint],
        duration_ms: int | None = None,
        policy: StopOverPolicy | None = None,
    ) -> Track:
        """Rebuild a track from already classified waypoints.

        The total distance is taken from the last waypoint. Waypoints are not
        reclassified.
        """

        track = cls(policy=policy)
        track._waypoints = list(waypoints)
        track._distance_m = track._waypoints[-1].distance_to_start_m if track._waypoints else 0.0
        if duration_ms is not None:
            track.set_track_duration(duration_ms)
        return track


def format_distance_m(distance_m: float) -> str:
    """Whole meters with unit suffix, rounding halves up (2.5 gives ``"3m"``)."""

    if not math.isfinite(distance_m):
        return f"{distance_m}m"
    meters = Decimal(distance_m).quantize(Decimal(1), rounding=ROUND_HALF_UP)
    return f"{meters}m"


def recording_duration_ms(positions: Sequence[Position]) -> int | None:
    """Elapsed time between the first and last timestamped sample.

    Returns:
        Milliseconds, or None if fewer than two samples carry a timestamp.
    """

    times = [p.geo_time_ms for p in positions if p.geo_time_ms > 0]
    if len(times) < 2:
        return None
    return max(0, times[-1] - times[0])


def build_track(positions: Iterable[Position], policy: StopOverPolicy | None = None) -> Track:
    """Feed positions into a new track in the given order.

    The duration is taken from the sample timestamps when available, the way a
    recorder would set it once recording stops.
    """

    pts = list(positions)
    track = Track(policy=policy)
    for pos in pts:
        track.add_waypoint(pos)
    duration = recording_duration_ms(pts)
    if duration is not None:
        track.set_track_duration(duration)
    return track
