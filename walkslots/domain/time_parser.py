"""
Conversion between "HH:mm" strings and minute-of-day integers.

All slot arithmetic happens on plain integers so that timezone and DST rules
never leak into the comparisons; absolute instants are only built at the very
end (see ``BookingWindow``).
"""

from .exceptions import FormatError

MINUTES_PER_DAY = 24 * 60


def parse_time(value: str) -> int:
    """
    Parse an "HH:mm" string into minutes since local midnight.

    Raises:
        FormatError: If the string is empty, lacks a colon, has non-numeric
            fields or an hour/minute outside its range.
    """
    if not isinstance(value, str) or ":" not in value:
        raise FormatError(f"Time must be HH:mm, got {value!r}")

    parts = value.split(":")
    if len(parts) != 2:
        raise FormatError(f"Time must be HH:mm, got {value!r}")

    hour_str, minute_str = parts
    if not (_is_number(hour_str) and _is_number(minute_str)):
        raise FormatError(f"Time must be HH:mm, got {value!r}")

    hour = int(hour_str)
    minute = int(minute_str)

    if not 0 <= hour <= 23:
        raise FormatError(f"Hour must be between 0 and 23, got {hour}")
    if not 0 <= minute <= 59:
        raise FormatError(f"Minute must be between 0 and 59, got {minute}")

    return hour * 60 + minute


def format_time(minutes: int) -> str:
    """Format a minute-of-day value as zero-padded "HH:mm"."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise FormatError(f"Minute of day must be in [0, {MINUTES_PER_DAY}), got {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def fold_minutes(minutes: int) -> int:
    """Fold an absolute minute count (possibly past midnight) back into a TimeOfDay."""
    return minutes % MINUTES_PER_DAY


def _is_number(field: str) -> bool:
    return field.isascii() and field.isdigit()
