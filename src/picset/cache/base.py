"""Single-flight key-value store contract and shared implementation."""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from picset.cache.stats import CacheStats

logger = logging.getLogger(__name__)

Factory = Callable[[str], Awaitable[str | None] | str | None]


class DedupCache(ABC):
    """String key-value store that runs at most one factory per key at a time."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value for ``key``, waiting for an in-flight computation."""

    @abstractmethod
    async def set(self, key: str, value: str | None) -> None:
        """Store ``value`` directly; ``None`` removes the key."""

    @abstractmethod
    async def get_or_create(self, key: str, factory: Factory) -> str | None:
        """Return the value for ``key``, calling ``factory(key)`` only if absent.

        Concurrent callers for the same key share a single factory call and
        receive the same value, or the same exception.
        """


class KeyValueStore(DedupCache):
    """DedupCache over an in-memory dict with per-key in-flight futures.

    Subclasses load the dict lazily in :meth:`_ensure_loaded` and react to
    changes in :meth:`_updated`.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._pending: dict[str, asyncio.Future[str | None]] = {}
        self._hits = 0
        self._misses = 0

    async def _ensure_loaded(self) -> None:
        return None

    async def _updated(self, key: str, value: str | None) -> None:
        return None

    async def get(self, key: str) -> str | None:
        await self._ensure_loaded()
        pending = self._pending.get(key)
        if pending is not None:
            try:
                await asyncio.shield(pending)
            except asyncio.CancelledError:
                if not pending.cancelled():
                    raise
            except Exception:
                # Failure is reported to get_or_create callers; the key is absent.
                pass
        return self._data.get(key)

    async def set(self, key: str, value: str | None) -> None:
        await self._ensure_loaded()
        if value is None:
            if self._data.pop(key, None) is None:
                return
        else:
            if self._data.get(key) == value:
                return
            self._data[key] = value
        await self._updated(key, value)

    async def get_or_create(self, key: str, factory: Factory) -> str | None:
        await self._ensure_loaded()
        while True:
            if key in self._data:
                self._hits += 1
                return self._data[key]
            pending = self._pending.get(key)
            if pending is None:
                break
            try:
                # shield: a cancelled joiner must not cancel the shared work
                value = await asyncio.shield(pending)
            except asyncio.CancelledError:
                if pending.cancelled():
                    continue  # owner was cancelled, start over
                raise
            self._hits += 1
            return value

        self._misses += 1
        future: asyncio.Future[str | None] = asyncio.get_running_loop().create_future()
        self._pending[key] = future
        logger.debug("Cache miss, computing '%s'", key)
        try:
            value = factory(key)
            if inspect.isawaitable(value):
                value = await value
        except asyncio.CancelledError:
            del self._pending[key]
            future.cancel()
            raise
        except Exception as exc:
            del self._pending[key]
            future.set_exception(exc)
            future.exception()  # mark retrieved when nobody joined
            raise

        del self._pending[key]
        if value is not None:
            self._data[key] = value
        future.set_result(value)
        if value is not None:
            await self._updated(key, value)
        return value

    def stats(self) -> CacheStats:
        return CacheStats(entries=len(self._data), hits=self._hits, misses=self._misses)

    def __len__(self) -> int:
        return len(self._data)
