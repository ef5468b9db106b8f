"""Time conversion and formatting utilities."""

from __future__ import annotations

from datetime import datetime, timezone

from zoneinfo import ZoneInfo


def tzinfo_from_name(tz_name: str) -> timezone:
    """Create tzinfo from an IANA timezone name.

    Args:
        tz_name: Timezone name like "Asia/Shanghai".

    Returns:
        tzinfo instance.

    Raises:
        ValueError: If timezone name is invalid on this system.
    """

    try:
        return ZoneInfo(tz_name)
    except Exception as exc:  # ZoneInfo raises KeyError / ZoneInfoNotFoundError (platform dependent)
        raise ValueError(f"无效时区：{tz_name!r}。例如可用：Asia/Shanghai") from exc


def dt_from_epoch_ms(epoch_ms: int, tz_name: str) -> datetime:
    """Convert epoch milliseconds to timezone-aware datetime.

    Args:
        epoch_ms: Unix epoch milliseconds.
        tz_name: IANA timezone name.

    Returns:
        Timezone-aware datetime.
    """

    tz = tzinfo_from_name(tz_name)
    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=tz)


def format_duration_ms(duration_ms: int) -> str:
    """Format a millisecond duration as zero-padded ``HH:MM:SS``.

    Every unit is truncated, never rounded. Hours are not wrapped at 24, so
    25 hours renders as ``"25:00:00"``. Negative durations render as ``"00:00:00"``.
    """

    total_s = max(0, int(duration_ms)) // 1000
    h = total_s // 3600
    m = (total_s // 60) % 60
    sec = total_s % 60
    return f"{h:02d}:{m:02d}:{sec:02d}"
