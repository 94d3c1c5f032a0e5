"""Basic settings and directory management."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir


def get_config_dir() -> Path:
    """Get the configuration directory."""
    return Path(os.environ.get("VIDEO_CHAPTERS_CONFIG_DIR", user_config_dir("video-chapters")))


def get_data_dir() -> Path:
    """Get the data directory for storing completion records."""
    return Path(os.environ.get("VIDEO_CHAPTERS_DATA_DIR", user_data_dir("video-chapters")))


def get_config_file() -> Path:
    """Get the config file path."""
    return get_config_dir() / "config.json"


def get_completions_dir() -> Path:
    """Get the directory holding per-video completion records."""
    return get_data_dir() / "completions"


def load_config() -> dict[str, Any]:
    """Load configuration from file."""
    config: dict[str, Any] = {}
    config_file = get_config_file()
    if config_file.exists():
        with open(config_file) as f:
            config = json.load(f)
    return config


def save_config(config: dict[str, Any]) -> None:
    """Save configuration to file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, "w") as f:
        json.dump(config, f, indent=2)


def ensure_dirs() -> None:
    """Ensure all required directories exist."""
    get_config_dir().mkdir(parents=True, exist_ok=True)
    get_data_dir().mkdir(parents=True, exist_ok=True)
    get_completions_dir().mkdir(parents=True, exist_ok=True)


# Chapter tracking configuration
DEFAULT_TRACKING_CONFIG = {
    "completion_threshold": 0.9,  # fraction of a chapter watched before auto-complete
    "fallback_window": 600,  # seconds given to the last chapter when duration is unknown
    "key_prefix": "segment_completions_",
    "legacy_key_prefix": "chapter_completions_",
}


def get_tracking_config() -> dict[str, Any]:
    """Get chapter tracking configuration with defaults."""
    config = load_config()
    tracking = config.get("tracking", {})
    return {**DEFAULT_TRACKING_CONFIG, **tracking}


# Cleanup configuration
DEFAULT_CLEANUP_CONFIG = {
    "enabled": True,
    "retention_days": 180,
    "schedule": "0 4 * * *",  # Daily at 04:00
    "max_videos": 1000,
}


def get_cleanup_config() -> dict[str, Any]:
    """Get cleanup configuration with defaults."""
    config = load_config()
    cleanup = config.get("cleanup", {})
    return {**DEFAULT_CLEANUP_CONFIG, **cleanup}
