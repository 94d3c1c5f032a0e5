"""Data models for video-chapters."""

from __future__ import annotations

from enum import Enum
from pydantic import BaseModel, Field


class SegmentState(str, Enum):
    """Learning state of a single chapter."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"


class Timestamp(BaseModel):
    """A time code found in a video description."""

    time: int = Field(ge=0)  # seconds
    label: str


class Segment(BaseModel):
    """A chapter window [start_time, end_time) within a video."""

    id: str
    start_time: int
    end_time: int
    title: str
    completed: bool = False


class SegmentView(Segment):
    """A segment as seen at one playback position."""

    state: SegmentState = SegmentState.PENDING
    progress: float = 0.0  # percent of this segment watched


class ProgressSnapshot(BaseModel):
    """Chapter progress of one video at one playback position."""

    video_id: str
    current_time: float = 0.0
    duration: float = 0.0
    active_index: int | None = None
    active_segment_id: str | None = None
    completed_count: int = 0
    total_segments: int = 0
    overall_progress: int = 0
    all_completed: bool = False
    segments: list[SegmentView] = Field(default_factory=list)
