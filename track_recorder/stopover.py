"""Stop-over classification between two consecutive position samples."""

from __future__ import annotations

from dataclasses import dataclass

from track_recorder.geo import is_inside_circle
from track_recorder.models import Position


@dataclass(frozen=True, slots=True)
class StopOverPolicy:
    """Parameters controlling the stationary / moving decision.

    A new sample counts as a stop-over when it lies within the stationary radius
    around the previous sample. The radius is the larger of ``min_movement_m`` and
    the reported measurement uncertainty (scaled by ``accuracy_factor`` and capped
    at ``max_accuracy_radius_m``).
    """

    # Movement below this distance is treated as GPS jitter.
    min_movement_m: float = 10.0
    # Multiplier for the larger horizontal accuracy of the two samples.
    accuracy_factor: float = 1.0
    # One very poor fix must not make a long hop look stationary.
    max_accuracy_radius_m: float = 50.0

    def stationary_radius_m(self, previous: Position, current: Position) -> float:
        """Radius (meters) within which ``current`` counts as not having moved."""

        accuracy = max(_accuracy_m(previous), _accuracy_m(current))
        accuracy_radius = min(self.accuracy_factor * accuracy, self.max_accuracy_radius_m)
        return max(self.min_movement_m, accuracy_radius)


DEFAULT_STOP_OVER_POLICY = StopOverPolicy()


def _accuracy_m(position: Position) -> float:
    acc = position.horizontal_accuracy_m
    # 未上报或哨兵值（-1）按 0 处理
    if acc is None or not acc > 0.0:
        return 0.0
    return acc


def is_stop_over(
    previous: Position,
    current: Position,
    policy: StopOverPolicy = DEFAULT_STOP_OVER_POLICY,
) -> bool:
    """Decide whether ``current`` is stationary relative to ``previous``.

    The result is advisory only. It never affects distance accumulation.
    """

    return is_inside_circle(
        current.latitude,
        current.longitude,
        previous.latitude,
        previous.longitude,
        policy.stationary_radius_m(previous, current),
    )
