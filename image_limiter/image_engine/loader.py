"""Serial decode queue.

Confines bounded decodes to one dedicated worker thread so callers never
block their own thread on codec work. Requests are independent; results are
delivered through ``concurrent.futures.Future``.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor

from image_limiter.logger import get_logger

from .bounded_decoder import BoundedDecoder, DecodedImage, DecodeRequest

_logger = get_logger("loader")


class DecodeQueue:
    """Run ``BoundedDecoder.decode`` on a single background thread."""

    def __init__(self, decoder: BoundedDecoder | None = None, thread_name: str = "image_limiter-decode"):
        self._decoder = decoder or BoundedDecoder()
        self.executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=thread_name)
        _logger.debug("DecodeQueue init: thread=%s", thread_name)

    @property
    def decoder(self) -> BoundedDecoder:
        return self._decoder

    def submit(
        self,
        request: DecodeRequest,
        callback: Callable[[DecodedImage | None], None] | None = None,
    ) -> Future:
        """Queue ``request``; the future resolves to a DecodedImage or None."""
        _logger.debug(
            "submit: bytes=%d constraint=%s limit=%s eager=%s",
            len(request.data),
            request.constraint,
            request.total_pixel_limit,
            request.decode_eagerly,
        )
        future = self.executor.submit(self._decoder.decode, request)
        if callback is not None:
            future.add_done_callback(lambda f: self._deliver(f, callback))
        return future

    @staticmethod
    def _deliver(future: Future, callback: Callable[[DecodedImage | None], None]) -> None:
        if future.cancelled():
            _logger.debug("decode cancelled; callback skipped")
            return
        exc = future.exception()
        if exc is not None:
            _logger.error("decode raised unexpectedly: %s", exc)
            return
        try:
            callback(future.result())
        except Exception:
            _logger.exception("decode callback failed")

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait, cancel_futures=not wait)

    def __enter__(self) -> DecodeQueue:
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)
