"""Blob storage: byte-level read/write of named paths."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

from picset.errors.exceptions import StorageError

logger = logging.getLogger(__name__)


class StorageBlob(Protocol):
    async def read(self) -> bytes: ...

    async def read_utf8(self) -> str: ...

    async def write(self, data: bytes | str) -> None: ...


class FileBlob:
    """A single file on the local filesystem."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def __str__(self) -> str:
        return f"FileBlob<{self.path}>"

    async def read(self) -> bytes:
        return await asyncio.to_thread(self._read_bytes)

    async def read_utf8(self) -> str:
        data = await self.read()
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StorageError(f"{self.path} is not valid UTF-8", path=str(self.path), original=e) from e

    async def write(self, data: bytes | str) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        await asyncio.to_thread(self._write_bytes, data)

    def _read_bytes(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise StorageError(f"Cannot read {self.path}: {e}", path=str(self.path), original=e) from e

    def _write_bytes(self, data: bytes) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}", path=str(self.path), original=e) from e
        logger.debug("Wrote %d bytes to %s", len(data), self.path)


async def write_output(data: bytes, output_name: str, output_directory: str) -> None:
    """Default storage writer: ``output_directory/output_name`` on disk."""
    await FileBlob(Path(output_directory) / output_name).write(data)
