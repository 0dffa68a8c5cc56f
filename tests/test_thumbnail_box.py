import pytest

from image_limiter.image_engine.decoder import thumbnail_box


@pytest.mark.parametrize(
    "width,height,max_dim,expected",
    [
        (4000, 3000, 3457, (3457, 2592)),
        (3000, 4000, 3457, (2592, 3457)),
        (4000, 3000, 3462, (3462, 2596)),
        (100, 100, 100, (100, 100)),
        (4000, 500, 1500, (1500, 187)),
        (10000, 1, 100, (100, 1)),
    ],
)
def test_thumbnail_box_floors_short_side(width, height, max_dim, expected):
    assert thumbnail_box(width, height, max_dim) == expected


@pytest.mark.parametrize("limit", [8_963_958, 8_989_880, 9_000_000, 1_000_000])
def test_thumbnail_box_fits_clamped_target(limit):
    from image_limiter.pixel_size import PixelSize, clamp_total_pixels

    target = clamp_total_pixels(PixelSize(4000, 3000), limit)
    box_w, box_h = thumbnail_box(4000, 3000, int(target.long_edge))
    assert box_w <= target.width and box_h <= target.height
    assert box_w * box_h <= limit
