"""Size consolidation — merge near-duplicate render widths into one asset."""

from __future__ import annotations

import math
from collections.abc import Iterable

from picset.errors.exceptions import InvalidInputError
from picset.types import Breakpoint, SizeSpec


def consolidate_sizes(
    breakpoints: Iterable[Breakpoint],
    densities: Iterable[float],
    threshold: float,
) -> dict[str, SizeSpec]:
    """Map every ``(image_width, density)`` pair to the width actually rendered.

    Sizes are walked from widest to narrowest. A size whose width is within
    ``threshold`` of the last independently rendered width reuses that width,
    so merged sizes only ever round up.
    """
    if not 0 < threshold <= 1:
        raise InvalidInputError(
            f"size threshold must be in (0, 1], got {threshold}", field="size_threshold"
        )

    densities = list(densities)
    all_sizes = [
        SizeSpec(
            density=density,
            width=breakpoint.image_width,
            actual_width=round_half_up(breakpoint.image_width * density),
        )
        for breakpoint in breakpoints
        for density in densities
    ]
    # sorted() is stable, equal widths keep enumeration order
    all_sizes.sort(key=lambda s: s.actual_width, reverse=True)

    consolidated: dict[str, SizeSpec] = {}
    last_used: SizeSpec | None = None
    for size in all_sizes:
        key = size_key(size.width, size.density)
        if last_used is not None and last_used.actual_width * threshold <= size.actual_width:
            consolidated[key] = size.model_copy(update={"actual_width": last_used.actual_width})
            continue
        consolidated[key] = size
        last_used = size
    return consolidated


def size_key(width: int, density: float) -> str:
    """Identity key of a size, e.g. ``300@2`` or ``300@1.5``."""
    return f"{format_number(width)}@{format_number(density)}"


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
