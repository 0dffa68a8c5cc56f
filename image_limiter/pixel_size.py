"""Pixel-size policy for bounded image decoding.

Edge constraints are applied as two separate downscale steps, short edge
first and long edge second, so the long-edge check sees the size that the
short-edge step already produced. A total-pixel clamp is applied afterwards
and floors each dimension so the limit is never exceeded.

Usage:
    from image_limiter.pixel_size import PixelSize, calculate_pixel_size

    size = calculate_pixel_size(PixelSize(4000, 3000), short_edge=1000)
"""

from __future__ import annotations

import math
from dataclasses import dataclass

DEFAULT_TOTAL_PIXEL_LIMIT: float = 15_000_000


@dataclass(frozen=True)
class PixelSize:
    width: float
    height: float

    @property
    def short_edge(self) -> float:
        return min(self.width, self.height)

    @property
    def long_edge(self) -> float:
        return max(self.width, self.height)

    @property
    def area(self) -> float:
        return self.width * self.height

    def floored(self) -> PixelSize:
        return PixelSize(math.floor(self.width), math.floor(self.height))


@dataclass(frozen=True)
class EdgeConstraint:
    """Optional caps on the short and long edge, in pixels.

    A non-positive value means "no cap" and is dropped by ``normalized()``.
    """

    short_edge: float | None = None
    long_edge: float | None = None

    def normalized(self) -> EdgeConstraint:
        return EdgeConstraint(_positive_or_none(self.short_edge), _positive_or_none(self.long_edge))

    @property
    def is_unconstrained(self) -> bool:
        n = self.normalized()
        return n.short_edge is None and n.long_edge is None


def _positive_or_none(value: float | None) -> float | None:
    if value is None or value <= 0:
        return None
    return value


def _scale_edge_to(size: PixelSize, edge: float, target: float) -> PixelSize:
    # The measured edge is pinned to ``target`` so a repeated pass is a no-op.
    factor = target / edge
    width = target if size.width == edge else size.width * factor
    height = target if size.height == edge else size.height * factor
    return PixelSize(width, height)


def apply_short_edge(size: PixelSize, short_edge: float | None) -> PixelSize:
    """Downscale ``size`` uniformly so its short edge is at most ``short_edge``."""
    short_edge = _positive_or_none(short_edge)
    if short_edge is None or not short_edge < size.short_edge:
        return size
    return _scale_edge_to(size, size.short_edge, short_edge)


def apply_long_edge(size: PixelSize, long_edge: float | None) -> PixelSize:
    """Downscale ``size`` uniformly so its long edge is at most ``long_edge``."""
    long_edge = _positive_or_none(long_edge)
    if long_edge is None or not long_edge < size.long_edge:
        return size
    return _scale_edge_to(size, size.long_edge, long_edge)


def calculate_pixel_size(
    original: PixelSize, short_edge: float | None = None, long_edge: float | None = None
) -> PixelSize:
    """Return the size of ``original`` after the edge constraints.

    Never upscales. Returns ``original`` itself when no usable constraint is given.
    """
    constraint = EdgeConstraint(short_edge, long_edge).normalized()
    if constraint.is_unconstrained:
        return original

    size = apply_short_edge(original, constraint.short_edge)
    return apply_long_edge(size, constraint.long_edge)


def clamp_total_pixels(size: PixelSize, limit: float) -> PixelSize:
    """Shrink ``size`` so width * height stays within ``limit``.

    Both dimensions share one scale factor and are floored independently, so
    the aspect ratio may drift by up to a pixel.
    """
    if size.area <= limit:
        return size
    scale = math.sqrt(size.area / limit)
    return PixelSize(math.floor(size.width / scale), math.floor(size.height / scale))


def target_pixel_size(
    original: PixelSize,
    constraint: EdgeConstraint | None = None,
    limit: float = DEFAULT_TOTAL_PIXEL_LIMIT,
) -> PixelSize:
    """Whole-pixel decode target: edge constraints, then the pixel clamp."""
    constraint = constraint or EdgeConstraint()
    size = calculate_pixel_size(original, constraint.short_edge, constraint.long_edge)
    return clamp_total_pixels(size, limit).floored()
