"""Open chapter-tracking sessions, one progress tracker per video."""

from __future__ import annotations

import logging
from typing import Any

from ..config import get_completions_dir, get_tracking_config
from ..models import Timestamp
from .metadata import fetch_chapter_source
from .segments import build_segments, find_active_index
from .store import JsonFileStore, KeyValueStore
from .timestamps import extract_timestamps, format_time, parse_timestamp
from .tracker import ProgressTracker

logger = logging.getLogger(__name__)

_sessions: dict[str, ProgressTracker] = {}


def get_store() -> KeyValueStore:
    """Get the persistent store for completion records."""
    return JsonFileStore(get_completions_dir())


def _not_open(video_id: str) -> dict[str, Any]:
    return {
        "success": False,
        "error": f"No open session for video: {video_id}",
    }


def _unknown_segment(segment_id: str) -> dict[str, Any]:
    return {
        "success": False,
        "error": f"Segment not found: {segment_id}",
    }


def _progress(tracker: ProgressTracker) -> dict[str, Any]:
    return tracker.snapshot().model_dump(mode="json")


def open_session(
    video_id: str,
    description: str | None = None,
    duration: float | None = None,
    timestamps: list[Timestamp] | None = None,
    store: KeyValueStore | None = None,
) -> dict[str, Any]:
    """
    Open (or reopen) chapter tracking for a video.

    Chapters come from explicit timestamps when given, otherwise from the
    description. Completion flags are loaded from the store, so reopening a
    video restores its progress. A session that is already open keeps its
    tracker and only rebuilds the segments.

    Args:
        video_id: Video identifier, used to namespace stored progress
        description: Video description to parse for time codes
        duration: Total video duration in seconds (optional)
        timestamps: Pre-extracted time codes (optional)
        store: Store override (defaults to the on-disk store)

    Returns:
        dict with has_chapters flag and the current progress snapshot
    """
    if not video_id:
        return {
            "success": False,
            "error": "video_id cannot be empty",
        }

    if timestamps is None:
        timestamps = extract_timestamps(description)

    existing = _sessions.get(video_id)
    if existing is not None and store is None:
        # Description edited while open: keep playback position and completions
        existing.set_timestamps(timestamps, duration=duration)
        logger.info(f"Rebuilt session for {video_id} with {len(existing.segments)} segments")
        return {
            "success": True,
            "video_id": video_id,
            "has_chapters": bool(existing.segments),
            "progress": _progress(existing),
        }

    config = get_tracking_config()
    try:
        tracker = ProgressTracker(
            video_id,
            timestamps,
            store if store is not None else get_store(),
            duration=duration or 0,
            threshold=config["completion_threshold"],
            fallback_window=config["fallback_window"],
            key_prefix=config["key_prefix"],
            legacy_key_prefix=config["legacy_key_prefix"],
        )
    except (TypeError, ValueError) as e:
        logger.error(f"Invalid tracking configuration: {e}")
        return {
            "success": False,
            "error": f"Invalid tracking configuration: {e}",
        }

    _sessions[video_id] = tracker
    logger.info(f"Opened session for {video_id} with {len(tracker.segments)} segments")

    return {
        "success": True,
        "video_id": video_id,
        "has_chapters": bool(tracker.segments),
        "progress": _progress(tracker),
    }


def open_session_from_url(url: str) -> dict[str, Any]:
    """
    Open chapter tracking for a video URL.

    Looks up the description and duration with yt-dlp, then opens a session
    keyed by the platform video id.
    """
    result = fetch_chapter_source(url)
    if not result["success"]:
        return result

    data = result["data"]
    if not data.get("video_id"):
        return {
            "success": False,
            "error": "Video info has no id",
        }

    opened = open_session(
        data["video_id"],
        duration=data.get("duration"),
        timestamps=data["timestamps"],
    )
    if opened["success"]:
        opened["title"] = data.get("title")
        opened["source"] = data.get("source")
    return opened


def close_session(video_id: str) -> dict[str, Any]:
    """Stop tracking a video. Stored progress is kept."""
    if _sessions.pop(video_id, None) is None:
        return _not_open(video_id)
    return {"success": True, "video_id": video_id}


def list_sessions() -> dict[str, Any]:
    """List open sessions with their overall progress."""
    sessions = [
        {
            "video_id": video_id,
            "total_segments": len(tracker.segments),
            "completed_count": tracker.completed_count,
            "overall_progress": tracker.overall_progress,
        }
        for video_id, tracker in _sessions.items()
    ]
    return {
        "success": True,
        "sessions": sessions,
        "count": len(sessions),
    }


def get_progress(video_id: str) -> dict[str, Any]:
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)
    return {"success": True, "progress": _progress(tracker)}


def record_playback(
    video_id: str,
    current_time: float,
    duration: float | None = None,
) -> dict[str, Any]:
    """
    Feed a playback sample from the player.

    Args:
        video_id: Video identifier
        current_time: Playback position in seconds
        duration: Total video duration in seconds, if known

    Returns:
        dict with newly_completed segment ids and the progress snapshot
    """
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)

    newly_completed = tracker.update(current_time, duration)
    return {
        "success": True,
        "newly_completed": newly_completed,
        "progress": _progress(tracker),
    }


def set_segment_completion(video_id: str, segment_id: str, completed: bool = True) -> dict[str, Any]:
    """Mark a segment complete or incomplete."""
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)

    if not tracker.set_completed(segment_id, completed):
        return _unknown_segment(segment_id)
    return {
        "success": True,
        "segment_id": segment_id,
        "completed": completed,
        "progress": _progress(tracker),
    }


def toggle_segment(video_id: str, segment_id: str) -> dict[str, Any]:
    """Flip a segment's completion flag."""
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)

    completed = tracker.toggle(segment_id)
    if completed is None:
        return _unknown_segment(segment_id)
    return {
        "success": True,
        "segment_id": segment_id,
        "completed": completed,
        "progress": _progress(tracker),
    }


def mark_all_complete(video_id: str) -> dict[str, Any]:
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)

    tracker.mark_all_complete()
    return {"success": True, "progress": _progress(tracker)}


def reset_progress(video_id: str) -> dict[str, Any]:
    """Clear all completion flags of a video, including the stored record."""
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)

    tracker.reset_progress()
    return {"success": True, "progress": _progress(tracker)}


def seek_to_segment(video_id: str, segment_id: str) -> dict[str, Any]:
    """Resolve the seek position for a segment the user selected."""
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)

    time = tracker.seek_target(segment_id)
    if time is None:
        return _unknown_segment(segment_id)
    return {"success": True, "segment_id": segment_id, "time": time}


def seek_relative(video_id: str, direction: str) -> dict[str, Any]:
    """
    Resolve the seek position of the segment after or before the active one.

    Args:
        video_id: Video identifier
        direction: "next" or "previous"
    """
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)

    if direction == "next":
        time = tracker.next_segment_start()
    elif direction == "previous":
        time = tracker.previous_segment_start()
    else:
        return {
            "success": False,
            "error": f"Invalid direction: {direction} (expected 'next' or 'previous')",
        }

    if time is None:
        return {
            "success": False,
            "error": f"No {direction} segment",
        }
    return {"success": True, "time": time}


def locate_position(video_id: str, timestamp: str | float) -> dict[str, Any]:
    """
    Find the segment containing a position given as seconds or H:MM:SS.

    Returns:
        dict with the position in seconds and the segment id (None if outside all segments)
    """
    tracker = _sessions.get(video_id)
    if tracker is None:
        return _not_open(video_id)

    try:
        time = parse_timestamp(timestamp)
    except ValueError as e:
        return {"success": False, "error": str(e)}

    index = find_active_index(tracker.segments, time)
    return {
        "success": True,
        "time": time,
        "segment_id": tracker.segments[index].id if index is not None else None,
    }


def parse_chapters(
    description: str | None,
    video_id: str = "preview",
    duration: float | None = None,
) -> dict[str, Any]:
    """
    Parse a description into chapters without opening a session.

    Returns:
        dict with segments, each with display labels for start and length
    """
    config = get_tracking_config()
    segments = build_segments(
        extract_timestamps(description),
        video_id,
        known_duration=duration,
        fallback_window=config["fallback_window"],
    )
    return {
        "success": True,
        "video_id": video_id,
        "count": len(segments),
        "segments": [
            {
                **segment.model_dump(mode="json"),
                "start_label": format_time(segment.start_time),
                "length_label": format_time(segment.end_time - segment.start_time),
            }
            for segment in segments
        ],
    }
