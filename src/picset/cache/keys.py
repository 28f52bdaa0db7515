"""Cache key generation — content-addressed on the input image."""

from __future__ import annotations

import hashlib


def generate_cache_key(image_hash: str, width: int, debug_text: str | None = None) -> str:
    """Build the cache key of one rendered width: ``{hash}@{width}:{debug_text}``.

    The format is shared with previously persisted cache files and must not
    change.
    """
    return f"{image_hash}@{width}:{debug_text or ''}"


def hash_image(image_bytes: bytes) -> str:
    """Hash image bytes for cache key use."""
    return hashlib.sha256(image_bytes).hexdigest()
