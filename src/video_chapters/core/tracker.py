"""Chapter progress tracking with persisted completion flags."""

from __future__ import annotations

import json
import logging
from typing import Iterable

from ..models import ProgressSnapshot, Segment, SegmentState, SegmentView, Timestamp
from .segments import (
    DEFAULT_FALLBACK_WINDOW,
    build_segments,
    find_active_index,
    make_segment_id,
    segment_progress,
)
from .store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_COMPLETION_THRESHOLD = 0.9
DEFAULT_KEY_PREFIX = "segment_completions_"
LEGACY_KEY_PREFIX = "chapter_completions_"


class ProgressTracker:
    """
    Tracks the active chapter and chapter completion for one video.

    Lifecycle:
    - __init__(): build segments and load persisted completions
    - update(): feed playback samples; auto-completes the active chapter
    - set_completed() / toggle() / mark_all_complete() / reset_progress():
      explicit user actions

    Every change to a completion flag writes the full completion mapping
    to the store under "{key_prefix}{video_id}".
    """

    def __init__(
        self,
        video_id: str,
        timestamps: Iterable[Timestamp],
        store: KeyValueStore,
        duration: float = 0,
        threshold: float = DEFAULT_COMPLETION_THRESHOLD,
        fallback_window: int = DEFAULT_FALLBACK_WINDOW,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        legacy_key_prefix: str | None = LEGACY_KEY_PREFIX,
    ):
        if not 0 < threshold <= 1:
            raise ValueError(f"Completion threshold must be in (0, 1], got {threshold}")

        self.video_id = video_id
        self.store = store
        self.threshold = threshold
        self.fallback_window = fallback_window
        self.key_prefix = key_prefix
        self.legacy_key_prefix = legacy_key_prefix
        self.current_time = 0.0
        self.duration = float(duration or 0)

        self._timestamps = list(timestamps)
        self._active_index: int | None = None
        self._legacy_loaded = False
        self.completions = self._load_completions()
        self.segments = self._build_segments()

    @property
    def storage_key(self) -> str:
        return f"{self.key_prefix}{self.video_id}"

    @property
    def legacy_storage_key(self) -> str | None:
        if not self.legacy_key_prefix or self.legacy_key_prefix == self.key_prefix:
            return None
        return f"{self.legacy_key_prefix}{self.video_id}"

    # Persistence

    def _load_completions(self) -> dict[str, bool]:
        """Load the completion mapping, treating unreadable data as empty."""
        raw = self.store.get(self.storage_key)
        if raw is None and self.legacy_storage_key:
            raw = self.store.get(self.legacy_storage_key)
            self._legacy_loaded = raw is not None
        if raw is None:
            return {}

        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring malformed completions for {self.video_id}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring completions for {self.video_id}: expected an object")
            return {}
        completions = {}
        for key, value in data.items():
            if not isinstance(value, bool):
                logger.warning(f"Ignoring non-boolean completion {key!r} for {self.video_id}: {value!r}")
                continue
            completions[str(key)] = value
        if self._legacy_loaded:
            completions = {self._from_legacy_id(key): value for key, value in completions.items()}
        return completions

    def _from_legacy_id(self, key: str) -> str:
        """Map a legacy "{video_id}-{seconds}" chapter id to the segment id scheme."""
        prefix = f"{self.video_id}-"
        suffix = key[len(prefix):]
        if key.startswith(prefix) and suffix.isdigit():
            return make_segment_id(self.video_id, int(suffix))
        return key

    def _save_completions(self) -> None:
        self.store.set(self.storage_key, json.dumps(self.completions))
        if self._legacy_loaded:
            self.store.delete(self.legacy_storage_key)
            self._legacy_loaded = False
            logger.info(f"Migrated legacy completions for {self.video_id} to {self.storage_key}")

    def _build_segments(self) -> list[Segment]:
        segments = build_segments(
            self._timestamps,
            self.video_id,
            known_duration=self.duration or None,
            fallback_window=self.fallback_window,
        )
        for segment in segments:
            segment.completed = self.completions.get(segment.id, False)
        return segments

    def set_timestamps(self, timestamps: Iterable[Timestamp], duration: float | None = None) -> None:
        """Replace the time codes (e.g. the description changed) and rebuild.

        Completion flags are kept by segment id, so chapters whose start did
        not move stay completed.
        """
        self._timestamps = list(timestamps)
        if duration:
            self.duration = float(duration)
        self.segments = self._build_segments()
        self._active_index = find_active_index(self.segments, self.current_time)

    # Playback

    def update(self, current_time: float, duration: float | None = None) -> list[str]:
        """
        Record a playback sample.

        A new duration rebuilds the segments so the last one ends at the real
        end of the video. The active segment is auto-completed once the
        watched fraction reaches the threshold.

        Args:
            current_time: Playback position in seconds
            duration: Total video duration in seconds, if known

        Returns:
            Ids of segments completed by this sample
        """
        self.current_time = max(float(current_time), 0.0)

        if duration and float(duration) != self.duration:
            self.duration = float(duration)
            self.segments = self._build_segments()

        previous = self._active_index
        self._active_index = find_active_index(self.segments, self.current_time)
        if self._active_index != previous:
            logger.debug(f"Active segment for {self.video_id}: {previous} -> {self._active_index}")

        segment = self.active_segment
        if segment is None or segment.completed:
            return []

        watched = (self.current_time - segment.start_time) / (segment.end_time - segment.start_time)
        if watched < self.threshold:
            return []

        self._set_completion(segment, True)
        logger.info(f"Auto-completed {segment.id} at {self.current_time:.1f}s ({watched:.0%} watched)")
        return [segment.id]

    # Completion flags

    def _find(self, segment_id: str) -> Segment | None:
        for segment in self.segments:
            if segment.id == segment_id:
                return segment
        return None

    def _set_completion(self, segment: Segment, completed: bool) -> None:
        if segment.completed == completed and self.completions.get(segment.id) == completed:
            return
        segment.completed = completed
        self.completions[segment.id] = completed
        self._save_completions()

    def set_completed(self, segment_id: str, completed: bool = True) -> bool:
        """Mark a segment complete or incomplete. Returns False for unknown ids."""
        segment = self._find(segment_id)
        if segment is None:
            return False
        self._set_completion(segment, completed)
        return True

    def toggle(self, segment_id: str) -> bool | None:
        """Flip a segment's completion flag and return the new value."""
        segment = self._find(segment_id)
        if segment is None:
            return None
        self._set_completion(segment, not segment.completed)
        return segment.completed

    def mark_all_complete(self) -> None:
        for segment in self.segments:
            segment.completed = True
            self.completions[segment.id] = True
        self._save_completions()

    def reset_progress(self) -> None:
        """Clear every completion flag and remove the persisted record."""
        for segment in self.segments:
            segment.completed = False
        self.completions = {}
        self.store.delete(self.storage_key)
        if self._legacy_loaded:
            self.store.delete(self.legacy_storage_key)
            self._legacy_loaded = False

    # Derived state

    @property
    def active_index(self) -> int | None:
        return self._active_index

    @property
    def active_segment(self) -> Segment | None:
        if self._active_index is None:
            return None
        return self.segments[self._active_index]

    @property
    def completed_count(self) -> int:
        return sum(1 for segment in self.segments if segment.completed)

    @property
    def overall_progress(self) -> int:
        """Completed share of all segments as a whole percentage (half rounds up)."""
        if not self.segments:
            return 0
        return int(self.completed_count * 100 / len(self.segments) + 0.5)

    @property
    def all_completed(self) -> bool:
        return bool(self.segments) and all(segment.completed for segment in self.segments)

    def state_of(self, index: int) -> SegmentState:
        if index == self._active_index:
            return SegmentState.ACTIVE
        if self.segments[index].completed:
            return SegmentState.COMPLETED
        return SegmentState.PENDING

    # Navigation

    def seek_target(self, segment_id: str) -> int | None:
        """Start time to seek to when a segment is selected."""
        segment = self._find(segment_id)
        return segment.start_time if segment else None

    def next_segment_start(self) -> int | None:
        if self._active_index is None or self._active_index >= len(self.segments) - 1:
            return None
        return self.segments[self._active_index + 1].start_time

    def previous_segment_start(self) -> int | None:
        if self._active_index is None or self._active_index == 0:
            return None
        return self.segments[self._active_index - 1].start_time

    def snapshot(self) -> ProgressSnapshot:
        active = self.active_segment
        views = []
        for i, segment in enumerate(self.segments):
            if segment.completed and i != self._active_index:
                progress = 100.0
            else:
                progress = segment_progress(segment, self.current_time)
            views.append(
                SegmentView(
                    **segment.model_dump(),
                    state=self.state_of(i),
                    progress=round(progress, 1),
                )
            )

        return ProgressSnapshot(
            video_id=self.video_id,
            current_time=self.current_time,
            duration=self.duration,
            active_index=self._active_index,
            active_segment_id=active.id if active else None,
            completed_count=self.completed_count,
            total_segments=len(self.segments),
            overall_progress=self.overall_progress,
            all_completed=self.all_completed,
            segments=views,
        )
