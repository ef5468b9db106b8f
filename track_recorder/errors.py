"""Central error types used across the package."""

from __future__ import annotations


class TrackError(Exception):
    """Base error for track operations."""


class WayPointIndexError(TrackError, IndexError):
    """Raised when a waypoint is requested by an index outside ``[0, size)``."""


class TrackDecodeError(TrackError, ValueError):
    """Raised when a flattened or serialized track cannot be restored."""


__all__ = [
    "TrackError",
    "WayPointIndexError",
    "TrackDecodeError",
]
