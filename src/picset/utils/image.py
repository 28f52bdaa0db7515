"""Input image loading."""

from __future__ import annotations

from pathlib import Path

from picset.errors.exceptions import InvalidInputError

_MAX_IMAGE_SIZE_BYTES = 50 * 1024 * 1024  # 50 MB


def load_image(path: str | Path) -> bytes:
    """Load an image file and return raw bytes."""
    path = Path(path)
    _validate_path(path)
    return path.read_bytes()


def _validate_path(path: Path) -> None:
    if not path.exists():
        raise InvalidInputError(f"File not found: {path}", field="input_image")
    if not path.is_file():
        raise InvalidInputError(f"Not a file: {path}", field="input_image")
    size = path.stat().st_size
    if size > _MAX_IMAGE_SIZE_BYTES:
        raise InvalidInputError(
            f"File too large ({size} bytes, max {_MAX_IMAGE_SIZE_BYTES})", field="input_image"
        )
