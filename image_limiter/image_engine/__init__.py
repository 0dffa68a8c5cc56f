"""Image Engine - bounded decoding on top of libvips.

This package provides:
- The codec contract and its pyvips implementation (decoder)
- Bounded decode under edge and total-pixel limits (bounded_decoder)
- A serial decode queue (loader)
- Raster helpers (raster) and in-process metrics (metrics)

Usage:
    from image_limiter.image_engine import BoundedDecoder

    decoder = BoundedDecoder()
    result = decoder.decode(decoder.make_request(data, short_edge=1000))
"""

from .bounded_decoder import BoundedDecoder, DecodedImage, DecodeRequest, get_image
from .decoder import DecoderBackend, MetadataHandle, VipsDecoder
from .loader import DecodeQueue

__all__ = [
    "BoundedDecoder",
    "DecodeQueue",
    "DecodeRequest",
    "DecodedImage",
    "DecoderBackend",
    "MetadataHandle",
    "VipsDecoder",
    "get_image",
]
