"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Storage layout
DEFAULT_CACHE_ROOT = Path.home() / ".imgcache"
DEFAULT_SUB_DIR = "images"

# Extension used when the URL filename has none
DEFAULT_EXTENSION = "jpg"

# Transport settings
DEFAULT_TIMEOUT_SECONDS = 30.0

# Prefetch fan-out; None means one worker per URL
DEFAULT_PREFETCH_WORKERS: int | None = None

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "cache_root": str(DEFAULT_CACHE_ROOT),
        "sub_dir": DEFAULT_SUB_DIR,
        "timeout": DEFAULT_TIMEOUT_SECONDS,
        "prefetch_workers": DEFAULT_PREFETCH_WORKERS,
        "log_level": DEFAULT_LOG_LEVEL,
    }
