"""Batch execution of async jobs: strictly sequential or concurrent."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_all(
    factories: Sequence[Callable[[], Awaitable[T]]],
    sequential: bool = False,
    max_workers: int | None = None,
) -> list[T]:
    """Run every job and return results in input order.

    Sequential mode awaits one job at a time, in order. Otherwise all jobs
    are dispatched at once, optionally bounded by ``max_workers``. The first
    failure propagates.
    """
    if sequential:
        results: list[T] = []
        for factory in factories:
            results.append(await factory())
        return results

    if max_workers is None or max_workers >= len(factories):
        return list(await asyncio.gather(*(factory() for factory in factories)))

    semaphore = asyncio.Semaphore(max(1, max_workers))

    async def worker(factory: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await factory()

    logger.debug("Running %d jobs with at most %d in flight", len(factories), max_workers)
    return list(await asyncio.gather(*(worker(f) for f in factories)))
