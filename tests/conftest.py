"""Pytest configuration.

Codec-backed tests build their image fixtures in memory with pyvips and are
skipped where libvips is not installed. Everything else runs against the
in-memory ``FakeBackend``.
"""

from __future__ import annotations

import pytest

from image_limiter.image_engine.metrics import metrics
from tests.helpers.fake_backend import FakeBackend


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def make_jpeg():
    """Return a factory producing JPEG bytes of the requested size."""
    pyvips = pytest.importorskip("pyvips")

    def _make(width: int, height: int, orientation: int | None = None) -> bytes:
        image = pyvips.Image.black(width, height) + 128
        image = image.cast("uchar")
        if orientation is not None:
            image = image.copy()
            image.set_type(pyvips.GValue.gint_type, "orientation", orientation)
        return image.write_to_buffer(".jpg")

    return _make


@pytest.fixture
def make_png():
    pyvips = pytest.importorskip("pyvips")

    def _make(width: int, height: int, bands: int = 3) -> bytes:
        image = pyvips.Image.black(width, height, bands=bands) + 200
        return image.cast("uchar").write_to_buffer(".png")

    return _make
