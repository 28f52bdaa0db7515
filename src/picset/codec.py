"""Image codec: resize and encode to WebP."""

from __future__ import annotations

import asyncio
import hashlib
import io
import logging
import re
from typing import Protocol

from PIL import Image, ImageDraw, ImageFilter, ImageFont, UnidentifiedImageError

from picset.errors.exceptions import CodecError
from picset.types import TransformedImage, TransformOptions

logger = logging.getLogger(__name__)

_DEFAULT_QUALITY = 85
_OUTPUT_FORMAT = "WEBP"
_LEADING_SPACES = re.compile(r"^ *")


class ImageCodec(Protocol):
    async def transform(self, data: bytes, options: TransformOptions) -> TransformedImage: ...


class PillowCodec:
    """Default codec on Pillow. Output is always WebP."""

    def __init__(self, default_quality: int = _DEFAULT_QUALITY) -> None:
        self._default_quality = default_quality

    async def transform(self, data: bytes, options: TransformOptions) -> TransformedImage:
        return await asyncio.to_thread(self._transform, data, options)

    def _transform(self, data: bytes, options: TransformOptions) -> TransformedImage:
        try:
            img = Image.open(io.BytesIO(data))
            img.load()
        except (UnidentifiedImageError, OSError) as e:
            raise CodecError(f"Cannot decode input image: {e}", original=e) from e

        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if "A" in img.getbands() else "RGB")

        if options.debug_text:
            img = _draw_debug_text(img, options.debug_text)

        size = _target_size(img.size, options.width, options.height)
        if size != img.size:
            img = img.resize(size, Image.Resampling.LANCZOS)

        buf = io.BytesIO()
        img.save(
            buf,
            format=_OUTPUT_FORMAT,
            quality=options.quality or self._default_quality,
            method=6,
        )
        encoded = buf.getvalue()
        width, height, fmt = _describe(encoded)
        logger.debug("Encoded %dx%d %s (%d bytes)", width, height, fmt, len(encoded))

        return TransformedImage(
            data=encoded,
            width=width,
            height=height,
            ext=_extension_for(fmt),
            hash=hashlib.sha256(encoded).hexdigest(),
        )


def _target_size(
    size: tuple[int, int], width: int | None, height: int | None
) -> tuple[int, int]:
    src_w, src_h = size
    if width and height:
        return width, height
    if width:
        return width, max(1, round(src_h * width / src_w))
    if height:
        return max(1, round(src_w * height / src_h)), height
    return size


def _describe(encoded: bytes) -> tuple[int, int, str]:
    try:
        out = Image.open(io.BytesIO(encoded))
    except (UnidentifiedImageError, OSError) as e:
        raise CodecError("Cannot parse resulting file - unknown output format", original=e) from e
    if not out.format:
        raise CodecError("Cannot parse resulting file - unknown output file extension")
    width, height = out.size
    if not width or not height:
        raise CodecError("Cannot transform image, unknown output width or height.")
    return width, height, out.format


def _extension_for(fmt: str) -> str:
    for ext, registered in Image.registered_extensions().items():
        if registered == fmt:
            return ext
    return f".{fmt.lower()}"


def _draw_debug_text(img: Image.Image, text: str) -> Image.Image:
    """Overlay white monospace text with a dark shadow in the top-left corner."""
    width, _ = img.size
    font_size = max(8, round(width / 35))
    try:
        font = ImageFont.truetype("DejaVuSansMono-Bold.ttf", font_size)
    except OSError:
        font = ImageFont.load_default(size=font_size)

    layer = Image.new("RGBA", img.size, (0, 0, 0, 0))
    shadow = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    shadow_draw = ImageDraw.Draw(shadow)

    line_height = round(font_size * 1.2)
    y = font_size + line_height
    for line in text.split("\n"):
        indent = len(_LEADING_SPACES.match(line).group(0))
        x = round(font_size * (1 + 0.5 * indent))
        content = line.lstrip(" ")
        shadow_draw.text((x, y), content, font=font, fill=(0, 0, 0, 255))
        draw.text((x, y), content, font=font, fill=(255, 255, 255, 255))
        y += line_height

    shadow = shadow.filter(ImageFilter.GaussianBlur(radius=max(1, font_size // 4)))
    base = img.convert("RGBA")
    base.alpha_composite(shadow)
    base.alpha_composite(layer)
    return base if img.mode == "RGBA" else base.convert("RGB")
