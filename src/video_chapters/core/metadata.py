"""Chapter source lookup (description and duration) without downloading."""

from __future__ import annotations

import logging
from typing import Any

from .segments import chapters_to_timestamps
from .timestamps import extract_timestamps

logger = logging.getLogger(__name__)


def _extract_chapter_source(info: dict) -> dict[str, Any]:
    """Pick the chapter-relevant fields from yt-dlp info.

    Args:
        info: Full video info dict from yt-dlp

    Returns:
        Dict with video_id, title, description, duration, timestamps and
        the origin of the timestamps ("description", "chapters" or None)
    """
    description = info.get("description") or ""
    timestamps = extract_timestamps(description)
    origin = "description" if timestamps else None

    # Fall back to platform chapter markers when the description has no time codes
    if not timestamps and info.get("chapters"):
        timestamps = chapters_to_timestamps(info["chapters"])
        origin = "chapters" if timestamps else None

    return {
        "video_id": info.get("id"),
        "title": info.get("title"),
        "description": description,
        "duration": info.get("duration"),
        "timestamps": timestamps,
        "source": origin,
    }


def fetch_chapter_source(url: str) -> dict[str, Any]:
    """
    Query the description, duration and chapters of a video without downloading.

    Args:
        url: Video URL (YouTube and any other site yt-dlp supports)

    Returns:
        dict with:
        - success: bool - True if query succeeded
        - data: dict - video_id, title, description, duration, timestamps, source
        - error: str - Error message (if success=False)
    """
    import yt_dlp

    ydl_opts = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
    }

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(url, download=False)

            if not info:
                return {
                    "success": False,
                    "error": "Could not extract video info from URL"
                }

            return {
                "success": True,
                "data": _extract_chapter_source(info),
            }

    except yt_dlp.utils.DownloadError as e:
        return {
            "success": False,
            "error": f"Invalid URL or unsupported site: {str(e)}"
        }
    except Exception as e:
        logger.error(f"Failed to query chapter source for {url}: {e}")
        return {
            "success": False,
            "error": f"Failed to query video info: {str(e)}"
        }
