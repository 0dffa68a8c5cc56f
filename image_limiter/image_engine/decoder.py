"""Codec backend using pyvips.

The bounded decoder talks to the codec through ``DecoderBackend``: a cheap
header read, then a separately requested bounded raster. ``VipsDecoder``
maps that onto libvips, whose thumbnail operation uses shrink-on-load so
the full-resolution bitmap is never materialized.
"""

from __future__ import annotations

import contextlib
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from image_limiter.logger import get_logger

_logger = get_logger("decoder")

# EXIF orientations that swap width and height once applied.
_TRANSPOSING_ORIENTATIONS = (5, 6, 7, 8)

_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        # The operation cache is process-wide; switch it off once so repeated
        # decodes do not pin pixel memory.
        pyvips.cache_set_max(0)
        pyvips.cache_set_max_mem(0)
        pyvips.cache_set_max_files(0)
        _logger.debug("libvips operation cache disabled")
        _pyvips = pyvips
    return _pyvips


def thumbnail_box(width: int, height: int, max_pixel_dimension: int) -> tuple[int, int]:
    """Box (w, h) whose long side is ``max_pixel_dimension`` and short side is floored."""
    scale = max_pixel_dimension / max(width, height)
    if width >= height:
        return max_pixel_dimension, max(1, math.floor(height * scale))
    return max(1, math.floor(width * scale)), max_pixel_dimension


@dataclass(frozen=True)
class MetadataHandle:
    """Compressed bytes plus a header-only view of them."""

    data: bytes
    header: Any


class DecoderBackend(ABC):
    """Narrow codec contract used by the bounded decoder."""

    @abstractmethod
    def open_metadata(self, data: bytes, cache_enabled: bool = False) -> MetadataHandle | None:
        """Open a header-only handle. Must not decode pixels.

        Returns None if the bytes are not a recognized image container.
        """

    @abstractmethod
    def read_dimensions(self, handle: MetadataHandle) -> tuple[int, int] | None:
        """Intrinsic (width, height) of the primary frame, or None."""

    @abstractmethod
    def create_thumbnail(
        self,
        handle: MetadataHandle,
        max_pixel_dimension: int,
        always_regenerate: bool = True,
        apply_orientation: bool = True,
        cache_immediately: bool = False,
    ) -> Any | None:
        """Produce a raster whose larger side is ``max_pixel_dimension``, or None."""

    @abstractmethod
    def read_container_properties(self, data: bytes) -> dict[str, Any]:
        """Container metadata for diagnostics. Empty dict on failure."""


class VipsDecoder(DecoderBackend):
    """libvips implementation of the codec contract.

    libvips keeps no per-image cache here: the operation cache is disabled
    for the whole process on first use, so ``cache_enabled`` cannot turn it
    back on for a single call.
    """

    def open_metadata(self, data: bytes, cache_enabled: bool = False) -> MetadataHandle | None:
        if not data:
            return None
        pyvips = _get_pyvips_module()
        if cache_enabled:
            _logger.debug("open_metadata: cache_enabled ignored, libvips cache is off process-wide")
        data = bytes(data)
        try:
            header = pyvips.Image.new_from_buffer(data, "", access="sequential")
        except pyvips.Error as e:
            _logger.debug("open_metadata failed: %s", e)
            return None
        return MetadataHandle(data=data, header=header)

    def read_dimensions(self, handle: MetadataHandle) -> tuple[int, int] | None:
        width = int(handle.header.width or 0)
        height = int(handle.header.height or 0)
        if width <= 0 or height <= 0:
            return None
        return width, height

    def create_thumbnail(
        self,
        handle: MetadataHandle,
        max_pixel_dimension: int,
        always_regenerate: bool = True,
        apply_orientation: bool = True,
        cache_immediately: bool = False,
    ) -> Any | None:
        dims = self.read_dimensions(handle)
        if max_pixel_dimension < 1 or dims is None:
            return None
        pyvips = _get_pyvips_module()
        width, height = dims
        if apply_orientation and self._orientation(handle) in _TRANSPOSING_ORIENTATIONS:
            width, height = height, width
        box_w, box_h = thumbnail_box(width, height, int(max_pixel_dimension))

        kwargs: dict[str, Any] = {"height": box_h, "size": "down", "no_rotate": not apply_orientation}
        if not always_regenerate and self._loader_name(handle).startswith("heifload"):
            # HEIF is the only container libvips reads embedded previews from.
            kwargs["option_string"] = "thumbnail=true"
        try:
            image = pyvips.Image.thumbnail_buffer(handle.data, box_w, **kwargs)
            if image.width > box_w or image.height > box_h:
                # libvips rounds the resized edges; trim the spare row/column.
                _logger.debug(
                    "create_thumbnail: trimming %dx%d to box %dx%d", image.width, image.height, box_w, box_h
                )
                image = image.crop(0, 0, min(image.width, box_w), min(image.height, box_h))
            if cache_immediately:
                image = image.copy_memory()
        except pyvips.Error as e:
            _logger.debug("create_thumbnail failed: %s", e)
            return None
        return image

    def read_container_properties(self, data: bytes) -> dict[str, Any]:
        handle = self.open_metadata(data)
        if handle is None:
            return {}
        pyvips = _get_pyvips_module()
        props: dict[str, Any] = {}
        for name in handle.header.get_fields():
            # Some field types (e.g. custom GObject boxes) cannot be read back.
            with contextlib.suppress(pyvips.Error):
                props[name] = handle.header.get(name)
        return props

    @staticmethod
    def _orientation(handle: MetadataHandle) -> int:
        if handle.header.get_typeof("orientation") == 0:
            return 1
        return int(handle.header.get("orientation"))

    @staticmethod
    def _loader_name(handle: MetadataHandle) -> str:
        pyvips = _get_pyvips_module()
        try:
            return str(handle.header.get("vips-loader"))
        except pyvips.Error:
            return ""
