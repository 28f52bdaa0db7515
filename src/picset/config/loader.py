"""YAML config loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from picset.config.schema import ImageSetConfig


def load_imageset_yaml(path: str | Path) -> ImageSetConfig:
    """Load an image set YAML file and return a validated ImageSetConfig."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image set YAML not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict) or "imageset" not in raw:
        raise ValueError(f"Invalid image set YAML: missing top-level 'imageset' key in {path}")

    return ImageSetConfig(**raw["imageset"])


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load any YAML file safely."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Expected YAML mapping, got {type(raw).__name__} in {path}")

    return raw
