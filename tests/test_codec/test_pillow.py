"""Tests for the Pillow codec."""

import hashlib
import io

import pytest
from PIL import Image

from picset.codec import PillowCodec, _target_size
from picset.errors.exceptions import CodecError
from picset.types import TransformOptions


class TestTargetSize:
    def test_width_keeps_aspect(self):
        assert _target_size((1600, 900), 800, None) == (800, 450)

    def test_height_keeps_aspect(self):
        assert _target_size((1600, 900), None, 450) == (800, 450)

    def test_both_is_exact(self):
        assert _target_size((1600, 900), 100, 100) == (100, 100)

    def test_neither_keeps_size(self):
        assert _target_size((1600, 900), None, None) == (1600, 900)


class TestPillowCodec:
    async def test_resizes_to_width_as_webp(self, photo_bytes):
        result = await PillowCodec().transform(photo_bytes, TransformOptions(width=800))
        assert result.width == 800
        assert result.height == 450
        assert result.ext == ".webp"
        assert Image.open(io.BytesIO(result.data)).format == "WEBP"

    async def test_hash_is_sha256_of_output(self, photo_bytes):
        result = await PillowCodec().transform(photo_bytes, TransformOptions(width=320))
        assert result.hash == hashlib.sha256(result.data).hexdigest()

    async def test_deterministic_output(self, photo_bytes):
        codec = PillowCodec()
        a = await codec.transform(photo_bytes, TransformOptions(width=320))
        b = await codec.transform(photo_bytes, TransformOptions(width=320))
        assert a.hash == b.hash

    async def test_no_resize_keeps_dimensions(self, sample_image_bytes):
        result = await PillowCodec().transform(sample_image_bytes, TransformOptions())
        assert (result.width, result.height) == (1, 1)

    async def test_quality_changes_output(self, photo_bytes):
        codec = PillowCodec()
        low = await codec.transform(photo_bytes, TransformOptions(width=400, quality=10))
        high = await codec.transform(photo_bytes, TransformOptions(width=400, quality=95))
        assert low.hash != high.hash

    async def test_debug_text_overlay(self, photo_bytes):
        codec = PillowCodec()
        plain = await codec.transform(photo_bytes, TransformOptions(width=400))
        marked = await codec.transform(
            photo_bytes, TransformOptions(width=400, debug_text='{\n    "width": 400\n}')
        )
        assert marked.width == plain.width
        assert marked.hash != plain.hash

    async def test_undecodable_input_raises_codec_error(self):
        with pytest.raises(CodecError):
            await PillowCodec().transform(b"definitely not an image", TransformOptions(width=10))

    async def test_palette_image_is_converted(self):
        img = Image.new("P", (40, 20))
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        result = await PillowCodec().transform(buf.getvalue(), TransformOptions(width=20))
        assert (result.width, result.height) == (20, 10)
