"""REST API routes for video-chapters."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query
from pydantic import BaseModel

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

router = APIRouter()


# Pydantic models for request bodies
class ParseRequest(BaseModel):
    """Request body for previewing chapters of a description."""
    description: str | None = None
    video_id: str = "preview"
    duration: float | None = None


class OpenSessionRequest(BaseModel):
    """Request body for opening a tracking session."""
    description: str | None = None
    duration: float | None = None


class OpenFromUrlRequest(BaseModel):
    """Request body for opening a tracking session from a video URL."""
    url: str


class PlaybackSample(BaseModel):
    """A playback position reported by the player."""
    current_time: float
    duration: float | None = None


class CompletionRequest(BaseModel):
    """Request body for marking a segment complete or incomplete."""
    completed: bool = True


@router.get("/health")
async def health():
    """Health check and service info."""
    return {
        "name": "video-chapters",
        "version": "0.1.0",
        "status": "healthy",
        "endpoints": {
            "api": "/api",
            "mcp": "/mcp",
            "docs": "/docs",
        },
    }


@router.post("/chapters/parse")
async def api_parse(request: ParseRequest):
    """Parse a description into chapters without tracking progress."""
    return parse_chapters(request.description, request.video_id, request.duration)


@router.get("/chapters/source")
async def api_chapter_source(
    url: Annotated[str, Query(description="Video URL to read description and chapters from")],
):
    """Query description, duration and time codes of a video without downloading."""
    result = fetch_chapter_source(url)
    if result["success"]:
        data = result["data"]
        data["timestamps"] = [ts.model_dump() for ts in data["timestamps"]]
    return result


@router.get("/sessions")
async def api_list_sessions():
    """List open tracking sessions."""
    return list_sessions()


@router.post("/sessions/from-url")
async def api_open_from_url(request: OpenFromUrlRequest):
    """Open a tracking session for a video URL (description looked up with yt-dlp)."""
    ensure_dirs()
    return open_session_from_url(request.url)


@router.post("/sessions/{video_id}")
async def api_open_session(video_id: str, request: OpenSessionRequest):
    """
    Open a tracking session for a video.

    Request body:
    ```json
    {
      "description": "0:00 Intro\\n5:30 Setup",
      "duration": 900
    }
    ```
    """
    ensure_dirs()
    return open_session(video_id, request.description, request.duration)


@router.get("/sessions/{video_id}")
async def api_get_progress(video_id: str):
    """Get the current progress snapshot of a video."""
    return get_progress(video_id)


@router.delete("/sessions/{video_id}")
async def api_close_session(video_id: str):
    """Close a tracking session. Stored progress is kept."""
    return close_session(video_id)


@router.post("/sessions/{video_id}/playback")
async def api_playback(video_id: str, sample: PlaybackSample):
    """Report the current playback position (about once per second while playing)."""
    return record_playback(video_id, sample.current_time, sample.duration)


@router.put("/sessions/{video_id}/segments/{segment_id}")
async def api_set_completion(video_id: str, segment_id: str, request: CompletionRequest):
    """Mark a segment complete or incomplete."""
    return set_segment_completion(video_id, segment_id, request.completed)


@router.post("/sessions/{video_id}/segments/{segment_id}/toggle")
async def api_toggle(video_id: str, segment_id: str):
    """Flip a segment's completion flag."""
    return toggle_segment(video_id, segment_id)


@router.get("/sessions/{video_id}/segments/{segment_id}/seek")
async def api_seek(video_id: str, segment_id: str):
    """Get the position to seek to for a segment."""
    return seek_to_segment(video_id, segment_id)


@router.get("/sessions/{video_id}/seek")
async def api_seek_relative(
    video_id: str,
    direction: Annotated[str, Query(description="'next' or 'previous' segment")],
):
    """Get the position of the segment after or before the active one."""
    return seek_relative(video_id, direction)


@router.get("/sessions/{video_id}/locate")
async def api_locate(
    video_id: str,
    timestamp: Annotated[str, Query(description="Position (seconds or H:MM:SS)")],
):
    """Find the segment containing a position."""
    return locate_position(video_id, timestamp)


@router.post("/sessions/{video_id}/complete-all")
async def api_complete_all(video_id: str):
    """Mark every segment complete."""
    return mark_all_complete(video_id)


@router.delete("/sessions/{video_id}/progress")
async def api_reset(video_id: str):
    """Reset all progress of a video."""
    return reset_progress(video_id)
