"""Shared models for picset."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from picset.cache.base import DedupCache

# ── Request models ──


class Breakpoint(BaseModel):
    """A layout breakpoint.

    ``max_width`` is the viewport max-width this breakpoint applies to; ``None``
    marks the fallback breakpoint used for the ``<img>`` element.
    ``image_width`` is the desired image width at 1x density.
    """

    max_width: int | None = None
    image_width: int = Field(gt=0)

    @property
    def is_fallback(self) -> bool:
        return self.max_width is None


class SizeSpec(BaseModel):
    density: float
    width: int  # nominal width at 1x
    actual_width: int  # rendered width, after consolidation


class TransformOptions(BaseModel):
    width: int | None = None
    height: int | None = None
    quality: int | None = None
    debug_text: str | None = None


class TransformedImage(BaseModel):
    """Codec output for a single render."""

    data: bytes
    width: int
    height: int
    ext: str  # with leading dot, e.g. ".webp"
    hash: str  # sha256 hex of data


class RenderedAsset(BaseModel):
    """A rendered file as stored in the cache."""

    src: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)


# Injected strategies
OutputNameGenerator = Callable[[str, TransformedImage], str]
StorageWriter = Callable[[bytes, str, str], Awaitable[None]]


@dataclass
class ImageResizeRequest:
    """Everything needed to render one responsive image set."""

    cache_store: DedupCache
    output_directory: str
    public_path_prefix: str
    input_image: bytes | str | Path
    breakpoints: list[Breakpoint]
    pixel_densities: list[float]
    size_threshold: float
    sequential: bool = False
    custom_output_name_generator: OutputNameGenerator | None = None
    custom_storage_writer: StorageWriter | None = None
    quality: int | None = None
    debug_sizes: bool = False
    max_workers: int | None = None


# ── Response models ──


class ImageSetAsset(BaseModel):
    """A srcset entry with the density it actually achieves in its source."""

    src: str
    dpi: float


class ImageSetSource(BaseModel):
    """A ``<source>`` of a picture, applying up to viewport width ``w``."""

    w: int
    srcset: list[ImageSetAsset] = Field(default_factory=list)


class ImageSet(BaseModel):
    """Picture sources, fallback srcset, and aspect ratio to prevent layout shift."""

    sources: list[ImageSetSource] = Field(default_factory=list)
    img: list[ImageSetAsset] = Field(default_factory=list)
    aspect: float


class ImageResizeResponse(BaseModel):
    image_set: ImageSet
    generated: int = 0
    cached: int = 0
