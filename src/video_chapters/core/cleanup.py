"""Pruning of stale per-video completion records."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..config import get_completions_dir
from .store import JsonFileStore

logger = logging.getLogger(__name__)


def get_record_age_days(store: JsonFileStore, key: str, now: datetime | None = None) -> float | None:
    """
    Get the age of a stored record in days, based on its last write.

    Returns:
        Age in days, or None if the record is missing or unreadable
    """
    updated_at = store.updated_at(key)
    if updated_at is None:
        return None
    now = now or datetime.now()
    return (now - updated_at).total_seconds() / 86400.0


def delete_record_safe(store: JsonFileStore, key: str) -> tuple[bool, str | None]:
    """
    Delete a stored record with error handling.

    Returns:
        Tuple of (success, error_message)
    """
    try:
        store.delete(key)
        return True, None
    except PermissionError as e:
        error_msg = f"Permission denied: {e}"
        logger.warning(f"Skipped {key}: {error_msg}")
        return False, error_msg
    except OSError as e:
        error_msg = f"Failed to delete: {e}"
        logger.error(f"Failed to delete {key}: {error_msg}")
        return False, error_msg


def cleanup_stale_completions(
    retention_days: float,
    max_videos: int | None = None,
) -> dict[str, Any]:
    """
    Remove completion records of videos that have not been touched recently.

    Process:
    1. Read every record in the completions directory
    2. Delete records whose last write is older than retention_days
    3. If more than max_videos records remain, delete the least recently
       written ones until max_videos are left

    Args:
        retention_days: Number of days to keep untouched records
        max_videos: Maximum number of records to keep (optional)

    Returns:
        Dictionary with cleanup statistics:
        {
            "success": True,
            "deleted_count": 3,
            "expired_count": 2,
            "evicted_count": 1,
            "remaining_count": 10,
            "errors": [],
        }
    """
    completions_dir = get_completions_dir()
    result: dict[str, Any] = {
        "success": True,
        "deleted_count": 0,
        "expired_count": 0,
        "evicted_count": 0,
        "remaining_count": 0,
        "errors": [],
    }

    if not completions_dir.exists():
        logger.info(f"Completions directory does not exist: {completions_dir}")
        return result

    store = JsonFileStore(completions_dir)
    now = datetime.now()
    kept: list[tuple[float, str]] = []

    for key in store.keys():
        age_days = get_record_age_days(store, key, now)
        if age_days is None:
            logger.debug(f"Skipped {key}: unable to determine age")
            continue

        if age_days <= retention_days:
            kept.append((age_days, key))
            continue

        logger.info(f"Deleting {key}: age {age_days:.2f} days")
        success, error_msg = delete_record_safe(store, key)
        if success:
            result["expired_count"] += 1
        else:
            result["errors"].append({"key": key, "error": error_msg})
            kept.append((age_days, key))

    if max_videos is not None and len(kept) > max_videos:
        # Oldest first
        kept.sort(reverse=True)
        overflow = len(kept) - max_videos
        evicted = []
        for age_days, key in kept[:overflow]:
            logger.info(f"Evicting {key}: over limit of {max_videos} records")
            success, error_msg = delete_record_safe(store, key)
            if success:
                result["evicted_count"] += 1
                evicted.append(key)
            else:
                result["errors"].append({"key": key, "error": error_msg})
        kept = [(age, key) for age, key in kept if key not in evicted]

    result["deleted_count"] = result["expired_count"] + result["evicted_count"]
    result["remaining_count"] = len(kept)
    return result
