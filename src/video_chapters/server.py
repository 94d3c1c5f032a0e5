"""MCP server for video-chapters using FastMCP."""

from __future__ import annotations

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from .config import ensure_dirs
from .core import (
    close_session,
    fetch_chapter_source,
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

# Create FastMCP server instance
# Disable DNS rebinding protection to allow any Host header (for Docker/reverse proxy)
mcp = FastMCP(
    "video-chapters",
    transport_security=TransportSecuritySettings(enable_dns_rebinding_protection=False),
)

# =============================================================================
# TOOL USAGE GUIDANCE FOR AI ASSISTANTS:
#
# To follow a learner through a video:
#   1. open_session (or open_session_from_url) → Chapters + stored progress
#   2. record_playback                         → Active chapter, auto-completion
#   3. seek_to_segment / seek_relative         → Where the player should jump
#
# Progress is stored per video and survives restarts. Closing a session does
# not delete progress; use reset_progress for that.
# =============================================================================


@mcp.tool(name="video_chapters_parse")
def tool_parse(description: str, video_id: str = "preview", duration: float | None = None) -> dict:
    """
    Parse a video description into chapters without tracking progress.

    Recognizes time codes like "0:00 Intro", "[1:02:03] - Deep dive" or
    "5:30 – Setup" at any position in the text.

    Args:
        description: Video description text
        video_id: Video id used for segment ids (optional)
        duration: Total video duration in seconds (optional, bounds the last chapter)
    """
    return parse_chapters(description, video_id, duration)


@mcp.tool(name="video_chapters_get_source")
def tool_get_source(url: str) -> dict:
    """
    Query description, duration and time codes of a video without downloading.

    Falls back to the platform's chapter markers when the description has
    no time codes.

    Args:
        url: Video URL (YouTube and other sites supported by yt-dlp)
    """
    result = fetch_chapter_source(url)
    if result["success"]:
        data = result["data"]
        data["timestamps"] = [ts.model_dump() for ts in data["timestamps"]]
    return result


@mcp.tool(name="video_chapters_open_session")
def tool_open_session(video_id: str, description: str, duration: float | None = None) -> dict:
    """
    Open chapter tracking for a video and restore its stored progress.

    Args:
        video_id: Video identifier (e.g. YouTube id)
        description: Video description to parse for chapters
        duration: Total video duration in seconds (optional)
    """
    ensure_dirs()
    return open_session(video_id, description, duration)


@mcp.tool(name="video_chapters_open_session_from_url")
def tool_open_session_from_url(url: str) -> dict:
    """
    Open chapter tracking for a video URL.

    The description and duration are looked up with yt-dlp.

    Args:
        url: Video URL
    """
    ensure_dirs()
    return open_session_from_url(url)


@mcp.tool(name="video_chapters_close_session")
def tool_close_session(video_id: str) -> dict:
    """
    Close a tracking session. Stored progress is kept.

    Args:
        video_id: Video identifier
    """
    return close_session(video_id)


@mcp.tool(name="video_chapters_list_sessions")
def tool_list_sessions() -> dict:
    """List open tracking sessions with their overall progress."""
    return list_sessions()


@mcp.tool(name="video_chapters_get_progress")
def tool_get_progress(video_id: str) -> dict:
    """
    Get chapter progress of a video: active chapter, per-chapter state and overall percentage.

    Args:
        video_id: Video identifier
    """
    return get_progress(video_id)


@mcp.tool(name="video_chapters_record_playback")
def tool_record_playback(video_id: str, current_time: float, duration: float | None = None) -> dict:
    """
    Report the current playback position.

    The chapter containing the position becomes active; it is marked complete
    once 90% of it has been watched.

    Args:
        video_id: Video identifier
        current_time: Playback position in seconds
        duration: Total video duration in seconds (optional)
    """
    return record_playback(video_id, current_time, duration)


@mcp.tool(name="video_chapters_set_completion")
def tool_set_completion(video_id: str, segment_id: str, completed: bool = True) -> dict:
    """
    Mark a chapter complete or incomplete.

    Args:
        video_id: Video identifier
        segment_id: Segment id from the progress snapshot
        completed: New completion flag
    """
    return set_segment_completion(video_id, segment_id, completed)


@mcp.tool(name="video_chapters_toggle_segment")
def tool_toggle_segment(video_id: str, segment_id: str) -> dict:
    """
    Flip a chapter's completion flag.

    Args:
        video_id: Video identifier
        segment_id: Segment id from the progress snapshot
    """
    return toggle_segment(video_id, segment_id)


@mcp.tool(name="video_chapters_mark_all_complete")
def tool_mark_all_complete(video_id: str) -> dict:
    """
    Mark every chapter of a video complete.

    Args:
        video_id: Video identifier
    """
    return mark_all_complete(video_id)


@mcp.tool(name="video_chapters_reset_progress")
def tool_reset_progress(video_id: str) -> dict:
    """
    Reset all chapter progress of a video, including stored progress.

    Args:
        video_id: Video identifier
    """
    return reset_progress(video_id)


@mcp.tool(name="video_chapters_seek_to_segment")
def tool_seek_to_segment(video_id: str, segment_id: str) -> dict:
    """
    Get the position (seconds) the player should seek to for a chapter.

    Args:
        video_id: Video identifier
        segment_id: Segment id from the progress snapshot
    """
    return seek_to_segment(video_id, segment_id)


@mcp.tool(name="video_chapters_seek_relative")
def tool_seek_relative(video_id: str, direction: str) -> dict:
    """
    Get the position of the chapter after or before the active one.

    Args:
        video_id: Video identifier
        direction: "next" or "previous"
    """
    return seek_relative(video_id, direction)


@mcp.tool(name="video_chapters_locate")
def tool_locate(video_id: str, timestamp: str) -> dict:
    """
    Find the chapter containing a position.

    Args:
        video_id: Video identifier
        timestamp: Position as seconds (e.g. '123.5') or H:MM:SS
    """
    return locate_position(video_id, timestamp)
