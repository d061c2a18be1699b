"""
Bouncer - Duration Utilities
============================

Parsing and formatting of timeout durations.

Usage:
    from bouncer.utils.duration import parse_duration, format_duration

    seconds = parse_duration("1h30m")   # 5400
    seconds = parse_duration("30")      # 1800 (plain number = minutes)
    display = format_duration(5400)     # "1h 30m"
"""

import re
from typing import Optional

from bouncer.core.constants import SECONDS_PER_DAY, SECONDS_PER_HOUR, SECONDS_PER_MINUTE


SECONDS_PER_WEEK = 7 * SECONDS_PER_DAY

TIME_MULTIPLIERS = {
    "w": SECONDS_PER_WEEK,
    "d": SECONDS_PER_DAY,
    "h": SECONDS_PER_HOUR,
    "m": SECONDS_PER_MINUTE,
    "s": 1,
}

_COMBINED = re.compile(r"(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?")


def parse_duration(duration_str: Optional[str]) -> Optional[int]:
    """
    Parse a duration string into seconds.

    Supports:
        - Plain number: "30" -> 30 minutes
        - Single unit: "45s", "10m", "2h", "1d", "1w"
        - Combined: "1d12h", "1h30m"
        - Spaces are ignored: "1h 30m"

    Returns:
        Duration in seconds, or None if invalid or zero.

    Examples:
        >>> parse_duration("1h")
        3600
        >>> parse_duration("10")
        600
        >>> parse_duration("soon")
    """
    if not duration_str:
        return None

    normalized = duration_str.lower().replace(" ", "")
    if not normalized:
        return None

    if normalized.isdigit():
        total = int(normalized) * SECONDS_PER_MINUTE
        return total if total > 0 else None

    match = _COMBINED.fullmatch(normalized)
    if not match or not any(match.groups()):
        return None

    total = sum(
        int(value or 0) * multiplier
        for value, multiplier in zip(match.groups(), TIME_MULTIPLIERS.values())
    )
    return total if total > 0 else None


def format_duration(seconds: Optional[int], max_units: int = 3) -> str:
    """
    Format seconds into "1d 2h 30m" style text.

    Examples:
        >>> format_duration(5400)
        "1h 30m"
        >>> format_duration(45)
        "45s"
    """
    if not seconds or seconds <= 0:
        return "0s"

    parts = []
    remaining = int(seconds)
    for unit, size in TIME_MULTIPLIERS.items():
        if remaining >= size and len(parts) < max_units:
            value, remaining = divmod(remaining, size)
            parts.append(f"{value}{unit}")
    return " ".join(parts)


__all__ = ["parse_duration", "format_duration", "SECONDS_PER_WEEK"]
