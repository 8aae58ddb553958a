"""Pace and clock-time formatting helpers."""
from __future__ import annotations

import math

NO_DATA = "--:--"


def _is_positive_number(value: object) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def pace_from_result(clock_time: float, distance: float) -> float:
    """Seconds per mile for a finished leg.

    Raises:
        ValueError: if clock_time or distance is not positive
    """
    if not _is_positive_number(distance):
        raise ValueError(f"distance must be positive, got {distance!r}")
    if not _is_positive_number(clock_time):
        raise ValueError(f"clock_time must be positive, got {clock_time!r}")
    return clock_time / distance


def format_pace(seconds_per_mile: float | None) -> str:
    """Format a pace as "M:SS/mi".

    Examples:
        - 480 → "8:00/mi"
        - 457.9 → "7:37/mi"
        - 0 / None → "--:--"
    """
    if not _is_positive_number(seconds_per_mile):
        return NO_DATA
    minutes = int(seconds_per_mile // 60)
    seconds = int(seconds_per_mile % 60)
    return f"{minutes}:{seconds:02d}/mi"


def format_time(total_seconds: float | None) -> str:
    """Format elapsed seconds as HH:MM:SS, or MM:SS under an hour."""
    if not _is_positive_number(total_seconds):
        return "00:00:00"
    total = int(total_seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    seconds = total % 60
    if hours > 0:
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{minutes:02d}:{seconds:02d}"


def format_pace_diff(diff_seconds: int) -> str:
    """Gap to the leader: positive is behind, negative is ahead."""
    if diff_seconds == 0:
        return "On pace"
    formatted = format_time(abs(diff_seconds))
    if diff_seconds < 0:
        return f"{formatted} ahead"
    return f"{formatted} behind"


def parse_time_to_seconds(value: str | None) -> int:
    """Parse "H:MM:SS" or "MM:SS" into seconds; malformed input gives 0.

    Examples:
        - "1:02:03" → 3723
        - "40:00" → 2400
        - "abc" → 0
    """
    if not value:
        return 0
    parts = value.strip().split(":")
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return 0
    if any(n < 0 for n in numbers):
        return 0
    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        return hours * 3600 + minutes * 60 + seconds
    if len(numbers) == 2:
        minutes, seconds = numbers
        return minutes * 60 + seconds
    return 0
