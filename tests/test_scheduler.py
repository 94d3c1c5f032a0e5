"""Tests for cleanup scheduler."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from video_chapters.core.scheduler import CleanupScheduler

MOCK_CONFIG = {"enabled": True, "retention_days": 30, "schedule": "0 4 * * *", "max_videos": 100}


@pytest.mark.asyncio
async def test_scheduler_start_stop():
    """Test scheduler starts and stops correctly."""
    scheduler = CleanupScheduler()

    with patch("video_chapters.core.scheduler.get_cleanup_config", return_value=MOCK_CONFIG):
        await scheduler.start()

        assert scheduler.scheduler.running is True

        jobs = scheduler.scheduler.get_jobs()
        assert len(jobs) == 1
        assert jobs[0].id == "cleanup_stale_completions"

        await scheduler.stop()


@pytest.mark.asyncio
async def test_scheduler_disabled_in_config():
    """Test scheduler doesn't start when disabled in config."""
    scheduler = CleanupScheduler()

    with patch(
        "video_chapters.core.scheduler.get_cleanup_config",
        return_value={**MOCK_CONFIG, "enabled": False},
    ):
        await scheduler.start()

        assert scheduler.scheduler.running is False


@pytest.mark.asyncio
async def test_scheduler_invalid_cron():
    """Test scheduler handles invalid cron expression gracefully."""
    scheduler = CleanupScheduler()

    with patch(
        "video_chapters.core.scheduler.get_cleanup_config",
        return_value={**MOCK_CONFIG, "schedule": "invalid cron"},
    ):
        await scheduler.start()

        assert scheduler.scheduler.running is False


@pytest.mark.asyncio
async def test_scheduler_cleanup_execution():
    """Test that cleanup runs with the configured limits when triggered."""
    scheduler = CleanupScheduler()

    mock_cleanup_result = {
        "success": True,
        "deleted_count": 3,
        "expired_count": 2,
        "evicted_count": 1,
        "remaining_count": 10,
        "errors": [{"key": "segment_completions_x", "error": "Permission denied"}],
    }

    with patch("video_chapters.core.scheduler.get_cleanup_config", return_value=MOCK_CONFIG), patch(
        "video_chapters.core.scheduler.cleanup_stale_completions", return_value=mock_cleanup_result
    ) as mock_cleanup:
        await scheduler.start()

        await scheduler._run_cleanup()

        mock_cleanup.assert_called_once_with(30, 100)

        await scheduler.stop()


@pytest.mark.asyncio
async def test_scheduler_cleanup_with_errors():
    """Test scheduler handles cleanup exceptions gracefully."""
    scheduler = CleanupScheduler()

    with patch("video_chapters.core.scheduler.get_cleanup_config", return_value=MOCK_CONFIG), patch(
        "video_chapters.core.scheduler.cleanup_stale_completions",
        side_effect=Exception("Test error"),
    ):
        await scheduler.start()

        # Should not raise exception
        await scheduler._run_cleanup()

        await scheduler.stop()


@pytest.mark.asyncio
async def test_scheduler_next_run_time():
    """Test that next run time is in the future."""
    scheduler = CleanupScheduler()

    with patch("video_chapters.core.scheduler.get_cleanup_config", return_value=MOCK_CONFIG):
        await scheduler.start()

        job = scheduler.scheduler.get_job("cleanup_stale_completions")
        assert job is not None
        assert job.next_run_time is not None

        from datetime import datetime

        assert job.next_run_time > datetime.now(job.next_run_time.tzinfo)

        await scheduler.stop()
