"""
Shared conversions used by both the parser and the violation rules.

Keeping them in one place means the parser, the schemas and the rule
checks agree on what a duration, an odometer reading or a log date means.
"""

from datetime import date, datetime
from typing import Optional

from config import DATE_FORMATS, DRIVING_STATUS, DURATION_PATTERNS, MONTH_NAME_PREFIX, PATTERNS


def parse_duration_to_minutes(duration: Optional[str]) -> int:
    """
    Convert a textual duration to whole minutes.

    Formats are tried in order: "H:MM" (or "H:MM:SS", seconds ignored),
    then "1h 30m" / "2 hours 15", then "90 min". Anything else is 0.

    Examples:
        "1:30"   -> 90
        "1h 30m" -> 90
        "90 min" -> 90
        ""       -> 0
    """
    if not duration or not duration.strip():
        return 0

    match = DURATION_PATTERNS["clock"].search(duration)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))

    match = DURATION_PATTERNS["hours_minutes"].search(duration)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2) or 0)

    match = DURATION_PATTERNS["minutes"].search(duration)
    if match:
        return int(match.group(1))

    return 0


def parse_odometer(value: Optional[str]) -> Optional[float]:
    """
    Parse an odometer token, keeping only digits and dots.

    Returns None (unknown) rather than 0 when nothing numeric survives.
    """
    if not value or not value.strip():
        return None

    cleaned = PATTERNS["odometer_cleanup"].sub("", value)
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_log_date(value: Optional[str]) -> Optional[date]:
    """
    Turn a loosely formatted date string into a calendar date.

    Accepts the same shapes the parser extracts (3/15/2024, 2024-03-15,
    3-15-2024, Mar 15, 2024, March 15 2024, Sept 20, 2024). Month names
    are matched on their first three letters. Returns None for "Unknown",
    empty strings and anything else that does not parse.
    """
    if not value:
        return None

    text = " ".join(value.strip().split())
    text = MONTH_NAME_PREFIX.sub(r"\1", text)
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def is_driving(status: Optional[str]) -> bool:
    """Case-insensitive check for the driving duty status."""
    return (status or "").strip().lower() == DRIVING_STATUS
