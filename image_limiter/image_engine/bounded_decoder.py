"""Bounded decode: produce a raster no larger than the computed pixel target.

The full-resolution bitmap is never materialized. Only the header is read to
learn the intrinsic size, and the codec is asked for a thumbnail whose larger
side matches the target.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from image_limiter.logger import get_logger
from image_limiter.pixel_size import (
    DEFAULT_TOTAL_PIXEL_LIMIT,
    EdgeConstraint,
    PixelSize,
    calculate_pixel_size,
    clamp_total_pixels,
)

from .decoder import DecoderBackend, VipsDecoder
from .errors import DecodeError, DecodeFailureError, MissingMetadataError, UnrecognizedContainerError
from .metrics import metrics

if TYPE_CHECKING:
    from image_limiter.settings_manager import SettingsManager

_logger = get_logger("bounded_decoder")


@dataclass(frozen=True)
class DecodeRequest:
    data: bytes = field(repr=False)
    constraint: EdgeConstraint = EdgeConstraint()
    total_pixel_limit: float = DEFAULT_TOTAL_PIXEL_LIMIT
    decode_eagerly: bool = False


@dataclass(frozen=True)
class DecodedImage:
    raster: Any
    original_size: PixelSize
    target_size: PixelSize


class BoundedDecoder:
    """Decode compressed image bytes under edge and total-pixel constraints.

    Stateless apart from the backend, so one instance may be shared across
    threads.
    """

    def __init__(
        self,
        backend: DecoderBackend | None = None,
        total_pixel_limit: float = DEFAULT_TOTAL_PIXEL_LIMIT,
    ) -> None:
        self._backend = backend or VipsDecoder()
        self.total_pixel_limit = _valid_limit(total_pixel_limit)

    @classmethod
    def from_settings(cls, settings: SettingsManager, backend: DecoderBackend | None = None) -> BoundedDecoder:
        return cls(backend=backend, total_pixel_limit=settings.total_pixel_limit)

    @property
    def backend(self) -> DecoderBackend:
        return self._backend

    def make_request(
        self,
        data: bytes,
        short_edge: float | None = None,
        long_edge: float | None = None,
        decode_eagerly: bool = False,
    ) -> DecodeRequest:
        return DecodeRequest(
            data=data,
            constraint=EdgeConstraint(short_edge, long_edge),
            total_pixel_limit=self.total_pixel_limit,
            decode_eagerly=decode_eagerly,
        )

    def decode(self, request: DecodeRequest) -> DecodedImage | None:
        """Decode ``request`` or return None. The failure cause is only logged."""
        metrics.record_request()
        try:
            with metrics.decode_timer():
                result, clamped = self._decode(request)
        except DecodeError as e:
            metrics.record_failure(e.reason)
            _logger.debug("decode failed (%s): %s", e.reason, e)
            return None
        metrics.record_decoded(clamped=clamped)
        return result

    def _decode(self, request: DecodeRequest) -> tuple[DecodedImage, bool]:
        handle = self._backend.open_metadata(request.data, cache_enabled=False)
        if handle is None:
            raise UnrecognizedContainerError(f"unrecognized image container ({len(request.data or b'')} bytes)")

        dims = self._backend.read_dimensions(handle)
        if dims is None:
            raise MissingMetadataError("pixel dimensions unavailable")

        original = PixelSize(*dims)
        limit = _valid_limit(request.total_pixel_limit)
        constraint = request.constraint
        edge_limited = calculate_pixel_size(original, constraint.short_edge, constraint.long_edge)
        clamped = clamp_total_pixels(edge_limited, limit)
        was_clamped = clamped is not edge_limited
        target = clamped.floored()

        max_dimension = int(target.long_edge)
        _logger.debug(
            "decode: original=%dx%d target=%dx%d max_dimension=%d clamped=%s eager=%s",
            original.width,
            original.height,
            target.width,
            target.height,
            max_dimension,
            was_clamped,
            request.decode_eagerly,
        )
        raster = self._backend.create_thumbnail(
            handle,
            max_dimension,
            always_regenerate=True,
            apply_orientation=True,
            cache_immediately=request.decode_eagerly,
        )
        if raster is None:
            raise DecodeFailureError(f"codec produced no raster for max_dimension={max_dimension}")
        return DecodedImage(raster=raster, original_size=original, target_size=target), was_clamped


def _valid_limit(limit: float) -> float:
    if limit is None or not math.isfinite(limit) or limit <= 0:
        _logger.warning("invalid total pixel limit %r; using default %d", limit, DEFAULT_TOTAL_PIXEL_LIMIT)
        return DEFAULT_TOTAL_PIXEL_LIMIT
    return limit


def get_image(
    data: bytes,
    short_edge: float | None = None,
    long_edge: float | None = None,
    total_pixel_limit: float = DEFAULT_TOTAL_PIXEL_LIMIT,
    decode_image: bool = False,
    backend: DecoderBackend | None = None,
) -> Any | None:
    """Decode ``data`` into a bounded raster, or None if it cannot be decoded."""
    decoder = BoundedDecoder(backend=backend, total_pixel_limit=total_pixel_limit)
    result = decoder.decode(decoder.make_request(data, short_edge, long_edge, decode_image))
    return None if result is None else result.raster
