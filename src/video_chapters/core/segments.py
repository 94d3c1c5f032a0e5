"""Segment building from extracted time codes."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable

from ..models import Segment, Timestamp

logger = logging.getLogger(__name__)

# Window given to the last chapter when the video duration is not known yet
DEFAULT_FALLBACK_WINDOW = 600


def make_segment_id(video_id: str, start_time: int) -> str:
    """Stable segment identifier, independent of list position."""
    return f"{video_id}-segment-{start_time}"


def build_segments(
    timestamps: Iterable[Timestamp],
    video_id: str,
    known_duration: float | None = None,
    fallback_window: int = DEFAULT_FALLBACK_WINDOW,
) -> list[Segment]:
    """
    Build contiguous chapter segments from time codes.

    Each segment covers [start_time, next start_time). The last one ends at
    the known duration when it lies past its start, otherwise it gets a
    fallback window. Repeated time codes keep only their first occurrence.

    Args:
        timestamps: Time codes in any order
        video_id: Video identifier used to derive segment ids
        known_duration: Total video duration in seconds (optional)
        fallback_window: Length of the last segment when duration is unknown

    Returns:
        Segments sorted by start time (empty if there are no time codes)
    """
    ordered = sorted(timestamps, key=lambda ts: ts.time)

    unique: list[Timestamp] = []
    for ts in ordered:
        if unique and unique[-1].time == ts.time:
            logger.debug(f"Dropping duplicate time code {ts.time}s ({ts.label!r}) for {video_id}")
            continue
        unique.append(ts)

    segments = []
    for i, ts in enumerate(unique):
        if i < len(unique) - 1:
            end_time = unique[i + 1].time
        elif known_duration and known_duration > ts.time:
            end_time = math.ceil(known_duration)
        else:
            end_time = ts.time + fallback_window

        segments.append(
            Segment(
                id=make_segment_id(video_id, ts.time),
                start_time=ts.time,
                end_time=end_time,
                title=ts.label,
            )
        )
    return segments


def chapters_to_timestamps(chapters: list[dict[str, Any]] | None) -> list[Timestamp]:
    """
    Convert platform chapter markers to time codes.

    Args:
        chapters: Chapter dicts as reported by yt-dlp ({"start_time", "title", ...})

    Returns:
        Timestamps for every chapter with a usable start time
    """
    timestamps = []
    for chapter in chapters or []:
        start = chapter.get("start_time")
        if start is None or start < 0:
            continue
        timestamps.append(Timestamp(time=int(start), label=(chapter.get("title") or "").strip()))
    return timestamps


def find_active_index(segments: list[Segment], current_time: float) -> int | None:
    """Index of the segment containing current_time, or None if there is none."""
    for i, segment in enumerate(segments):
        if segment.start_time <= current_time < segment.end_time:
            return i
    return None


def segment_progress(segment: Segment, current_time: float) -> float:
    """Percentage of a segment watched at current_time (0-100)."""
    if current_time <= segment.start_time:
        return 0.0
    if current_time >= segment.end_time:
        return 100.0

    watched = current_time - segment.start_time
    return watched / (segment.end_time - segment.start_time) * 100
