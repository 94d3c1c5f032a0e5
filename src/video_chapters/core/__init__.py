"""Core functionality for video-chapters."""

from .cleanup import cleanup_stale_completions
from .metadata import fetch_chapter_source
from .scheduler import CleanupScheduler
from .segments import build_segments, chapters_to_timestamps, find_active_index, segment_progress
from .sessions import (
    close_session,
    get_progress,
    list_sessions,
    locate_position,
    mark_all_complete,
    open_session,
    open_session_from_url,
    parse_chapters,
    record_playback,
    reset_progress,
    seek_relative,
    seek_to_segment,
    set_segment_completion,
    toggle_segment,
)
from .store import JsonFileStore, KeyValueStore, MemoryStore
from .timestamps import extract_timestamps, format_time, parse_timestamp
from .tracker import ProgressTracker

__all__ = [
    # Engine
    "extract_timestamps",
    "format_time",
    "parse_timestamp",
    "build_segments",
    "chapters_to_timestamps",
    "find_active_index",
    "segment_progress",
    "ProgressTracker",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "fetch_chapter_source",
    # Sessions
    "open_session",
    "open_session_from_url",
    "close_session",
    "list_sessions",
    "get_progress",
    "record_playback",
    "set_segment_completion",
    "toggle_segment",
    "mark_all_complete",
    "reset_progress",
    "seek_to_segment",
    "seek_relative",
    "locate_position",
    "parse_chapters",
    # Cleanup
    "cleanup_stale_completions",
    "CleanupScheduler",
]
