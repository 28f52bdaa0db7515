"""Persistent cache — a flat JSON object of strings stored in one blob."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable

from picset.cache.base import KeyValueStore
from picset.errors.exceptions import CacheError, CacheLoadError, CacheSaveError
from picset.storage import StorageBlob

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[CacheError], None]
SaveFunction = Callable[[], Awaitable[None]]
UpdateHandler = Callable[[str, str | None, SaveFunction], Awaitable[None]]


async def save_immediately(key: str, value: str | None, save: SaveFunction) -> None:
    """Default update handler: write-through on every change."""
    await save()


class JsonFileStore(KeyValueStore):
    """DedupCache persisted as a single JSON document.

    The blob is read lazily on first use. Load and save failures are reported
    to ``on_load_error`` / ``on_save_error`` (logged when not given) and never
    raised: a broken cache file means an empty cache, a failed save leaves the
    in-memory copy authoritative.

    ``on_update(key, value, save)`` runs after every change; the default
    calls ``save`` immediately, pass a custom handler to batch saves.
    """

    def __init__(
        self,
        blob: StorageBlob,
        on_update: UpdateHandler | None = None,
        on_load_error: ErrorHandler | None = None,
        on_save_error: ErrorHandler | None = None,
    ) -> None:
        super().__init__()
        self._blob = blob
        self._on_update = on_update or save_immediately
        self._on_load_error = on_load_error
        self._on_save_error = on_save_error
        self._loaded = False
        self._load_lock = asyncio.Lock()
        self._save_lock = asyncio.Lock()

    async def load(self, force_reload: bool = False) -> dict[str, str]:
        """Load the blob once; ``force_reload`` re-reads it.

        Returns a copy of the resolved entries. Never raises.
        """
        if self._loaded and not force_reload:
            return dict(self._data)
        async with self._load_lock:
            if not self._loaded or force_reload:
                self._data = await self._read()
                self._loaded = True
                logger.info("Loaded %d cache entries from %s", len(self._data), self._blob)
        return dict(self._data)

    async def save(self) -> None:
        """Write all resolved entries to the blob. Never raises."""
        async with self._save_lock:
            try:
                if not self._loaded:
                    raise CacheSaveError(
                        "save() called before any data has been loaded or set.",
                        blob=str(self._blob),
                    )
                payload = json.dumps(dict(self._data))
                await self._blob.write(payload)
            except CacheSaveError as e:
                self._report(self._on_save_error, e, "save")
            except Exception as e:
                self._report(
                    self._on_save_error,
                    CacheSaveError(str(e), blob=str(self._blob), original=e),
                    "save",
                )
            else:
                logger.debug("Saved %d cache entries to %s", len(self._data), self._blob)

    async def _ensure_loaded(self) -> None:
        await self.load()

    async def _updated(self, key: str, value: str | None) -> None:
        try:
            await self._on_update(key, value, self.save)
        except Exception:
            logger.exception("Cache update handler failed for key '%s'", key)

    async def _read(self) -> dict[str, str]:
        try:
            data = json.loads(await self._blob.read_utf8())
            if not isinstance(data, dict):
                raise CacheLoadError(
                    f"'{self._blob}' does not contain a JSON-formatted object.",
                    blob=str(self._blob),
                )
            if any(not isinstance(v, str) for v in data.values()):
                raise CacheLoadError(
                    f"'{self._blob}' contains non-string values.", blob=str(self._blob)
                )
        except CacheLoadError as e:
            self._report(self._on_load_error, e, "load")
            return {}
        except Exception as e:
            self._report(
                self._on_load_error,
                CacheLoadError(str(e), blob=str(self._blob), original=e),
                "load",
            )
            return {}
        return data

    def _report(self, hook: ErrorHandler | None, error: CacheError, action: str) -> None:
        if hook is None:
            logger.error("JSON cache %s error: %s", action, error.message)
            return
        try:
            hook(error)
        except Exception:
            logger.exception(
                "JSON cache %s error: %s; the error hook also failed", action, error.message
            )
