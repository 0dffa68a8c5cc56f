import threading

from image_limiter.image_engine.metrics import metrics


def test_outcomes_and_timings():
    metrics.record_request()
    metrics.record_request()
    with metrics.decode_timer():
        pass
    metrics.record_decoded(clamped=True)
    metrics.record_failure("missing_metadata")

    snap = metrics.snapshot()
    assert snap["counters"][metrics.REQUESTS] == 2
    assert metrics.count(metrics.DECODED) == 1
    assert metrics.count(metrics.CLAMPED) == 1
    assert metrics.count("missing") == 0
    assert metrics.failures() == {"missing_metadata": 1}
    assert len(snap["timings"][metrics.DURATION]) == 1


def test_decoded_without_clamp_leaves_clamped_counter_alone():
    metrics.record_decoded()
    assert metrics.count(metrics.DECODED) == 1
    assert metrics.count(metrics.CLAMPED) == 0


def test_timer_records_on_error():
    try:
        with metrics.decode_timer():
            raise ValueError("boom")
    except ValueError:
        pass
    assert len(metrics.snapshot()["timings"][metrics.DURATION]) == 1


def test_concurrent_requests():
    def _work():
        for _ in range(1000):
            metrics.record_request()

    threads = [threading.Thread(target=_work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert metrics.count(metrics.REQUESTS) == 4000


def test_reset_clears_everything():
    metrics.record_failure("decode_failure")
    metrics.reset()
    assert metrics.snapshot() == {"counters": {}, "timings": {}}
