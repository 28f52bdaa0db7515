"""Pydantic models for image set configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from picset.config.defaults import (
    DEFAULT_PIXEL_DENSITIES,
    DEFAULT_SIZE_THRESHOLD,
)
from picset.types import Breakpoint


class ImageSetConfig(BaseModel):
    """What to render for one image: breakpoints, densities, and tuning."""

    breakpoints: list[Breakpoint]
    pixel_densities: list[float] = Field(default_factory=lambda: list(DEFAULT_PIXEL_DENSITIES))
    size_threshold: float = Field(default=DEFAULT_SIZE_THRESHOLD, gt=0, le=1)
    quality: int | None = Field(default=None, ge=1, le=100)
    sequential: bool = False
    debug_sizes: bool = False
    max_workers: int | None = Field(default=None, ge=1)

    @field_validator("pixel_densities")
    @classmethod
    def _positive_densities(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("at least one pixel density is required")
        if any(d <= 0 for d in value):
            raise ValueError("pixel densities must be positive")
        return value

    @model_validator(mode="after")
    def _one_fallback(self) -> ImageSetConfig:
        fallbacks = sum(1 for b in self.breakpoints if b.is_fallback)
        if fallbacks != 1:
            raise ValueError(
                f"exactly one fallback breakpoint (max_width: null) is required, got {fallbacks}"
            )
        return self

    @property
    def source_breakpoints(self) -> list[Breakpoint]:
        return [b for b in self.breakpoints if not b.is_fallback]
