"""Configuration module for video-chapters."""

from .settings import (
    ensure_dirs,
    get_cleanup_config,
    get_completions_dir,
    get_config_dir,
    get_config_file,
    get_data_dir,
    get_tracking_config,
    load_config,
    save_config,
)

__all__ = [
    "ensure_dirs",
    "get_cleanup_config",
    "get_completions_dir",
    "get_config_dir",
    "get_config_file",
    "get_data_dir",
    "get_tracking_config",
    "load_config",
    "save_config",
]
