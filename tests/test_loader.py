import threading

from image_limiter.image_engine.bounded_decoder import BoundedDecoder, DecodeRequest
from image_limiter.image_engine.loader import DecodeQueue
from image_limiter.pixel_size import EdgeConstraint, PixelSize
from tests.helpers.fake_backend import FakeBackend

DATA = b"IMG queued"


def test_submit_resolves_to_decoded_image(fake_backend: FakeBackend):
    with DecodeQueue(BoundedDecoder(backend=fake_backend)) as queue:
        future = queue.submit(DecodeRequest(DATA, EdgeConstraint(short_edge=1000)))
        result = future.result(timeout=5)
    assert result is not None
    assert result.target_size == PixelSize(1333, 1000)


def test_submit_failure_resolves_to_none(fake_backend: FakeBackend):
    with DecodeQueue(BoundedDecoder(backend=fake_backend)) as queue:
        assert queue.submit(DecodeRequest(b"")).result(timeout=5) is None


def test_all_work_runs_on_one_dedicated_thread(fake_backend: FakeBackend):
    seen: list[str] = []

    class _RecordingDecoder(BoundedDecoder):
        def decode(self, request):
            seen.append(threading.current_thread().name)
            return super().decode(request)

    with DecodeQueue(_RecordingDecoder(backend=fake_backend), thread_name="decode-test") as queue:
        futures = [queue.submit(DecodeRequest(DATA)) for _ in range(5)]
        for f in futures:
            f.result(timeout=5)

    assert len(seen) == 5
    assert len(set(seen)) == 1
    assert seen[0].startswith("decode-test")
    assert threading.current_thread().name not in seen


def test_callback_receives_result(fake_backend: FakeBackend):
    received = []
    done = threading.Event()

    def _on_done(result):
        received.append(result)
        done.set()

    queue = DecodeQueue(BoundedDecoder(backend=fake_backend))
    try:
        queue.submit(DecodeRequest(DATA, EdgeConstraint(long_edge=400)), callback=_on_done)
        assert done.wait(timeout=5)
    finally:
        queue.shutdown()

    assert received[0].target_size == PixelSize(400, 300)


def test_callback_errors_do_not_break_the_queue(fake_backend: FakeBackend):
    def _boom(result):
        raise RuntimeError("consumer bug")

    with DecodeQueue(BoundedDecoder(backend=fake_backend)) as queue:
        queue.submit(DecodeRequest(DATA), callback=_boom).result(timeout=5)
        assert queue.submit(DecodeRequest(DATA)).result(timeout=5) is not None
