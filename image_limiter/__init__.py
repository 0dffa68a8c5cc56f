"""Bounded image decoding: pixel-size policy plus downsampled decode."""

from .data_size import size_in_kb, size_in_mb
from .pixel_size import (
    DEFAULT_TOTAL_PIXEL_LIMIT,
    EdgeConstraint,
    PixelSize,
    calculate_pixel_size,
    clamp_total_pixels,
    target_pixel_size,
)

__all__ = [
    "DEFAULT_TOTAL_PIXEL_LIMIT",
    "EdgeConstraint",
    "PixelSize",
    "calculate_pixel_size",
    "clamp_total_pixels",
    "size_in_kb",
    "size_in_mb",
    "target_pixel_size",
]
