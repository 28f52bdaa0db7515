"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path
from typing import Any

# Default rendering settings
DEFAULT_SIZE_THRESHOLD = 0.8
DEFAULT_PIXEL_DENSITIES = [1.0, 2.0]
DEFAULT_QUALITY = 85
DEFAULT_SEQUENTIAL = False
DEFAULT_MAX_WORKERS = None

# Default output settings
DEFAULT_OUTPUT_DIRECTORY = "picset-out"
DEFAULT_PUBLIC_PATH_PREFIX = "/images"

# Default cache settings
DEFAULT_CACHE_FILE = str(Path.home() / ".picset" / "cache.json")
DEFAULT_CACHE_DISABLED = False

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "size_threshold": DEFAULT_SIZE_THRESHOLD,
        "pixel_densities": list(DEFAULT_PIXEL_DENSITIES),
        "quality": DEFAULT_QUALITY,
        "sequential": DEFAULT_SEQUENTIAL,
        "max_workers": DEFAULT_MAX_WORKERS,
        "output_directory": DEFAULT_OUTPUT_DIRECTORY,
        "public_path_prefix": DEFAULT_PUBLIC_PATH_PREFIX,
        "cache_file": DEFAULT_CACHE_FILE,
        "cache_disabled": DEFAULT_CACHE_DISABLED,
        "log_level": DEFAULT_LOG_LEVEL,
    }
