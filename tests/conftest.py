"""Pytest configuration with isolated data directories."""

from __future__ import annotations

import asyncio

import pytest

from video_chapters.core import sessions
from video_chapters.core.store import MemoryStore

SAMPLE_VIDEO_ID = "dQw4w9WgXcQ"

# Deliberately out of order, with bracketed, dashed and hour-based codes
SAMPLE_DESCRIPTION = """Learn the basics in one sitting.

Chapters:
5:00 - Core concepts
0:00 Intro
[1:00] – Setup
1:02:03 — Wrap-up

Links: https://example.com
"""


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy."""
    return asyncio.DefaultEventLoopPolicy()


def pytest_configure(config):
    """Configure pytest-asyncio and custom markers."""
    config.addinivalue_line("markers", "asyncio: mark test as async")
    config.addinivalue_line(
        "markers", "network: marks tests as requiring network access"
    )


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Point config and data directories at a temp dir and start with no open sessions."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    monkeypatch.setenv("VIDEO_CHAPTERS_CONFIG_DIR", str(config_dir))
    monkeypatch.setenv("VIDEO_CHAPTERS_DATA_DIR", str(data_dir))

    sessions._sessions.clear()
    yield {"config_dir": config_dir, "data_dir": data_dir}
    sessions._sessions.clear()


@pytest.fixture
def sample_description():
    """Description with chapters out of chronological order."""
    return SAMPLE_DESCRIPTION


@pytest.fixture
def video_id():
    return SAMPLE_VIDEO_ID


@pytest.fixture
def memory_store():
    """Empty in-memory key-value store."""
    return MemoryStore()
