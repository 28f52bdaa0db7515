"""Error handling — exception hierarchy."""

from picset.errors.exceptions import (
    CacheError,
    CacheLoadError,
    CacheSaveError,
    CodecError,
    InvalidInputError,
    PicsetError,
    StorageError,
)

__all__ = [
    "PicsetError",
    "InvalidInputError",
    "CodecError",
    "StorageError",
    "CacheError",
    "CacheLoadError",
    "CacheSaveError",
]
