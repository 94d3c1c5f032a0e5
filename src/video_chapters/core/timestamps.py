"""Time code extraction from free-text video descriptions."""

from __future__ import annotations

import math
import re

from ..models import Timestamp

# Common formats: 0:00, 00:00, 0:00:00, [00:00], followed by "-", "–", "—" or same-line whitespace
TIMESTAMP_PATTERN = re.compile(
    r"\[?(\d{1,2}):(\d{2})(?::(\d{2}))?\]?"
    r"(?:[^\S\r\n]?[-–—][^\S\r\n]?|[^\S\r\n])"
    r"([^\r\n]+)"
)


def extract_timestamps(text: str | None) -> list[Timestamp]:
    """
    Extract every time code and its label from a description.

    With three numeric groups the code reads H:MM:SS, with two it reads M:SS.
    The label is the rest of the line after the separator, trimmed.

    Args:
        text: Description text (None is treated as empty)

    Returns:
        Timestamps in the order they appear in the text (not sorted, not deduplicated)
    """
    timestamps = []
    for match in TIMESTAMP_PATTERN.finditer(text or ""):
        first, second, third, label = match.groups()
        if third is not None:
            hours, minutes, seconds = int(first), int(second), int(third)
        else:
            hours, minutes, seconds = 0, int(first), int(second)

        timestamps.append(
            Timestamp(time=hours * 3600 + minutes * 60 + seconds, label=label.strip())
        )
    return timestamps


def format_time(seconds: float) -> str:
    """Format seconds as H:MM:SS, or M:SS for anything under an hour."""
    total = int(seconds)
    hrs = total // 3600
    mins = (total % 3600) // 60
    secs = total % 60

    if hrs > 0:
        return f"{hrs}:{mins:02d}:{secs:02d}"
    return f"{mins}:{secs:02d}"


def parse_timestamp(value: str | float) -> float:
    """
    Parse a seek position to seconds.

    Supported formats:
    - 123.45 or "123.45" (seconds)
    - "1:23" (minutes:seconds)
    - "1:02:03" (hours:minutes:seconds)

    Returns:
        float: Position in seconds
    """
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Invalid timestamp: {value}")
        return float(value)

    value = value.strip()

    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds) or seconds < 0:
            raise ValueError(f"Invalid timestamp: {value}")
        return seconds

    match = re.fullmatch(r"(?:(\d+):)?(\d+):(\d+(?:\.\d+)?)", value)
    if match:
        hours = int(match.group(1) or 0)
        minutes = int(match.group(2))
        seconds = float(match.group(3))
        return hours * 3600 + minutes * 60 + seconds

    raise ValueError(f"Invalid timestamp format: {value}")
