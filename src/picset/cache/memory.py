"""Process-local single-flight cache."""

from __future__ import annotations

from picset.cache.base import KeyValueStore


class MemoryStore(KeyValueStore):
    """In-memory DedupCache, lost when the process exits."""

    def clear(self) -> None:
        """Drop all resolved entries. In-flight computations are unaffected."""
        self._data.clear()
