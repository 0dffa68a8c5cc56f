"""Helpers for rasters produced by the bounded decoder."""

from __future__ import annotations

import contextlib
from typing import Any

import numpy as np

from image_limiter.logger import get_logger
from image_limiter.pixel_size import PixelSize, calculate_pixel_size

from .decoder import _get_pyvips_module

_logger = get_logger("raster")

RGB_CHANNELS = 3


def limit_raster(image: Any, short_edge: float | None = None, long_edge: float | None = None) -> Any:
    """Shrink an already decoded raster by short/long edge caps.

    Returns ``image`` itself when the constraints leave its size unchanged.
    """
    original = PixelSize(image.width, image.height)
    scaled = calculate_pixel_size(original, short_edge, long_edge)
    if scaled == original:
        return image
    factor = scaled.width / original.width
    _logger.debug(
        "limit_raster: %dx%d -> %.1fx%.1f (factor=%.4f)",
        original.width,
        original.height,
        scaled.width,
        scaled.height,
        factor,
    )
    return image.resize(factor)


def to_rgb_array(image: Any) -> np.ndarray:
    """Materialize a raster as an H x W x 3 uint8 numpy array."""
    pyvips = _get_pyvips_module()
    with contextlib.suppress(pyvips.Error):
        image = image.colourspace("srgb")
    if image.hasalpha():
        image = image.flatten(background=[0, 0, 0])
    if image.bands > RGB_CHANNELS:
        image = image.extract_band(0, n=RGB_CHANNELS)
    elif image.bands < RGB_CHANNELS:
        image = pyvips.Image.bandjoin([image] * RGB_CHANNELS)
    if image.format != "uchar":
        image = image.cast("uchar")

    mem = image.write_to_memory()
    array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    if array.shape[2] != RGB_CHANNELS:
        raise RuntimeError(f"Unsupported band count after conversion: {array.shape[2]}")
    return array.copy()
