import asyncio
import hashlib
import io
import os

import pytest
from PIL import Image

from picset.cache.memory import MemoryStore
from picset.errors.exceptions import CodecError, StorageError
from picset.types import Breakpoint, ImageResizeRequest, TransformedImage


class FakeCodec:
    """Codec stand-in: output width equals the requested width, fixed aspect."""

    def __init__(self, aspect: float = 16 / 9, delay: float = 0.0) -> None:
        self.aspect = aspect
        self.delay = delay
        self.calls = []
        self.fail_widths: set[int] = set()
        self.max_width: int | None = None

    async def transform(self, data, options):
        self.calls.append(options)
        await asyncio.sleep(self.delay)
        if options.width in self.fail_widths:
            raise CodecError(f"cannot render {options.width}")
        width = options.width
        if self.max_width is not None:
            width = min(width, self.max_width)
        height = round(width / self.aspect)
        encoded = b"webp:" + data[:8] + str(width).encode() + (options.debug_text or "").encode()
        return TransformedImage(
            data=encoded,
            width=width,
            height=height,
            ext=".webp",
            hash=hashlib.sha256(encoded).hexdigest(),
        )


class MemoryBlob:
    """StorageBlob kept in memory; ``content=None`` behaves like a missing file."""

    def __init__(self, content: str | None = None) -> None:
        self.content = content
        self.writes = 0
        self.reads = 0
        self.fail_writes = False

    def __str__(self) -> str:
        return "MemoryBlob"

    async def read(self) -> bytes:
        self.reads += 1
        if self.content is None:
            raise StorageError("blob does not exist")
        return self.content.encode("utf-8")

    async def read_utf8(self) -> str:
        return (await self.read()).decode("utf-8")

    async def write(self, data) -> None:
        if self.fail_writes:
            raise StorageError("disk full")
        self.content = data if isinstance(data, str) else data.decode("utf-8")
        self.writes += 1


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user/project config and PICSET_* env vars out of tests."""
    from picset.config import hierarchy

    monkeypatch.setattr(hierarchy, "_GLOBAL_CONFIG_PATH", tmp_path / "global-config.yaml")
    for name in list(os.environ):
        if name.startswith("PICSET_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def sample_image_bytes():
    """Minimal valid PNG for testing (1x1 white pixel)."""
    import base64
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR4"
        "nGP4z8BQDwAEgAF/pooBPQAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def photo_bytes():
    """A 1600x900 PNG with a gradient, large enough to downscale."""
    img = Image.linear_gradient("L").resize((1600, 900)).convert("RGB")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def fake_codec():
    return FakeCodec()


@pytest.fixture
def memory_blob():
    return MemoryBlob()


@pytest.fixture
def written_files():
    """Collects files passed to the storage writer, keyed by output name."""
    return {}


@pytest.fixture
def make_request(written_files):
    """Build an ImageResizeRequest with an in-memory cache and writer."""

    async def writer(data: bytes, output_name: str, output_directory: str) -> None:
        written_files[output_name] = data

    def factory(**overrides):
        params = dict(
            cache_store=MemoryStore(),
            output_directory="out",
            public_path_prefix="/img",
            input_image=b"source-image-bytes",
            breakpoints=[
                Breakpoint(max_width=600, image_width=300),
                Breakpoint(max_width=None, image_width=1200),
            ],
            pixel_densities=[1, 2],
            size_threshold=0.8,
            custom_storage_writer=writer,
        )
        params.update(overrides)
        return ImageResizeRequest(**params)

    return factory
