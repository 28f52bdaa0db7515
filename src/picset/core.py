"""Top-level entry points: process_image_request() and ImageSetProcessor."""

from __future__ import annotations

import asyncio
import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path, PurePath

from pydantic import ValidationError

from picset.cache.keys import generate_cache_key, hash_image
from picset.codec import ImageCodec, PillowCodec
from picset.concurrency.pool import run_all
from picset.errors.exceptions import InvalidInputError
from picset.sizes import consolidate_sizes, size_key
from picset.storage import write_output
from picset.types import (
    Breakpoint,
    ImageResizeRequest,
    ImageResizeResponse,
    ImageSet,
    ImageSetAsset,
    ImageSetSource,
    RenderedAsset,
    SizeSpec,
    TransformedImage,
    TransformOptions,
)
from picset.utils.image import load_image

logger = logging.getLogger(__name__)


@dataclass
class _RenderJob:
    breakpoint_index: int
    size: SizeSpec


@dataclass
class _RenderResult:
    asset: RenderedAsset
    dpi: float
    generated: bool


class ImageSetProcessor:
    """Renders responsive image sets through a shared cache.

    The processor only holds the codec; each request brings its own cache
    store, which may be shared between requests and processors.
    """

    def __init__(self, codec: ImageCodec | None = None) -> None:
        self._codec = codec or PillowCodec()

    async def process(self, request: ImageResizeRequest) -> ImageResizeResponse:
        """Render every size the request needs and assemble the image set."""
        fallback, sources = _validate_request(request)
        input_image = await _resolve_input(request.input_image)
        input_hash = hash_image(input_image)

        consolidated = consolidate_sizes(
            request.breakpoints, request.pixel_densities, request.size_threshold
        )

        ordered = [*sources, fallback]
        jobs: list[_RenderJob] = []
        for index, breakpoint in enumerate(ordered):
            for density in request.pixel_densities:
                key = size_key(breakpoint.image_width, density)
                size = consolidated.get(key)
                if size is None:
                    raise InvalidInputError(
                        f"miscalculated consolidated sizes, no key {key}"
                    )
                jobs.append(_RenderJob(breakpoint_index=index, size=size))

        results = await run_all(
            [self._job_runner(request, input_image, input_hash, job) for job in jobs],
            sequential=request.sequential,
            max_workers=request.max_workers,
        )

        srcsets: list[list[ImageSetAsset]] = [[] for _ in ordered]
        generated_by_src: dict[str, bool] = {}
        widest: RenderedAsset | None = None
        for job, result in zip(jobs, results, strict=True):
            asset = result.asset
            generated_by_src[asset.src] = generated_by_src.get(asset.src, False) or result.generated
            if widest is None or widest.width < asset.width:
                widest = asset
            srcset = srcsets[job.breakpoint_index]
            if all(existing.src != asset.src for existing in srcset):
                srcset.append(ImageSetAsset(src=asset.src, dpi=result.dpi))

        image_set = ImageSet(
            sources=[
                ImageSetSource(w=breakpoint.max_width, srcset=srcset)
                for breakpoint, srcset in zip(sources, srcsets, strict=False)
            ],
            img=srcsets[-1],
            aspect=round(widest.width / widest.height, 5),
        )
        generated = sum(1 for g in generated_by_src.values() if g)
        cached = len(generated_by_src) - generated
        logger.info("Image set ready: %d generated, %d cached", generated, cached)
        return ImageResizeResponse(image_set=image_set, generated=generated, cached=cached)

    def _job_runner(
        self,
        request: ImageResizeRequest,
        input_image: bytes,
        input_hash: str,
        job: _RenderJob,
    ):
        async def run() -> _RenderResult:
            return await self._render(request, input_image, input_hash, job.size)

        return run

    async def _render(
        self,
        request: ImageResizeRequest,
        input_image: bytes,
        input_hash: str,
        size: SizeSpec,
    ) -> _RenderResult:
        debug_text = _debug_text(size) if request.debug_sizes else None
        cache_key = generate_cache_key(input_hash, size.actual_width, debug_text)
        generated = False

        async def factory(key: str) -> str:
            nonlocal generated
            generated = True
            transformed = await self._codec.transform(
                input_image,
                TransformOptions(
                    width=size.actual_width, quality=request.quality, debug_text=debug_text
                ),
            )
            asset = await _store(request, transformed)
            logger.debug("Rendered %s (%dx%d)", asset.src, asset.width, asset.height)
            return asset.model_dump_json()

        entry = await request.cache_store.get_or_create(cache_key, factory)
        asset = _parse_entry(entry)
        if asset is None:
            logger.warning("Discarding corrupt cache entry '%s'", cache_key)
            await request.cache_store.set(cache_key, None)
            entry = await request.cache_store.get_or_create(cache_key, factory)
            asset = _parse_entry(entry)
            if asset is None:
                raise InvalidInputError(f"Could not process image for cache key {cache_key}")

        dpi = math.floor(asset.width / size.width * 100) / 100
        return _RenderResult(asset=asset, dpi=dpi, generated=generated)


async def process_image_request(
    request: ImageResizeRequest, codec: ImageCodec | None = None
) -> ImageResizeResponse:
    """Render a responsive image set (convenience wrapper)."""
    return await ImageSetProcessor(codec).process(request)


def _validate_request(request: ImageResizeRequest) -> tuple[Breakpoint, list[Breakpoint]]:
    if not request.input_image:
        raise InvalidInputError("Invalid input image", field="input_image")
    if not request.breakpoints:
        raise InvalidInputError("At least one breakpoint is required", field="breakpoints")
    if not request.pixel_densities:
        raise InvalidInputError("At least one pixel density is required", field="pixel_densities")
    if any(d <= 0 for d in request.pixel_densities):
        raise InvalidInputError("Pixel densities must be positive", field="pixel_densities")

    fallbacks = [b for b in request.breakpoints if b.is_fallback]
    if not fallbacks:
        raise InvalidInputError(
            "Fallback breakpoint (with max_width: None) is required", field="breakpoints"
        )
    if len(fallbacks) > 1:
        raise InvalidInputError(
            "Exactly one fallback breakpoint (with max_width: None) is allowed",
            field="breakpoints",
        )
    sources = [b for b in request.breakpoints if not b.is_fallback]
    return fallbacks[0], sources


async def _resolve_input(input_image: bytes | str | Path) -> bytes:
    if isinstance(input_image, (bytes, bytearray)):
        return bytes(input_image)
    return await asyncio.to_thread(load_image, input_image)


async def _store(request: ImageResizeRequest, transformed: TransformedImage) -> RenderedAsset:
    if request.custom_output_name_generator:
        output_name = request.custom_output_name_generator(transformed.hash, transformed)
    else:
        output_name = default_output_name(transformed)

    writer = request.custom_storage_writer or write_output
    await writer(transformed.data, output_name, request.output_directory)

    prefix = request.public_path_prefix.rstrip("/")
    return RenderedAsset(
        src=f"{prefix}/{PurePath(output_name).as_posix()}",
        width=transformed.width,
        height=transformed.height,
    )


def default_output_name(transformed: TransformedImage) -> str:
    """``{hash[:2]}/{hash[2:10]}-{width}{ext}`` on the rendered content hash."""
    digest = transformed.hash
    return str(PurePath(digest[:2]) / f"{digest[2:10]}-{transformed.width}{transformed.ext}")


def _debug_text(size: SizeSpec) -> str:
    """Indented JSON of the size, keyed and ordered as in persisted debug cache keys."""
    density = int(size.density) if float(size.density).is_integer() else size.density
    return json.dumps(
        {"width": size.width, "density": density, "actualWidth": size.actual_width},
        indent=4,
    )


def _parse_entry(entry: str | None) -> RenderedAsset | None:
    if entry is None:
        return None
    try:
        return RenderedAsset.model_validate_json(entry)
    except ValidationError:
        return None
