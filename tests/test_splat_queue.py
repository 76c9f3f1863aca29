import threading

import pytest

from fluid_utils import SplatQueue, SplatRequest


def make_request(i):
    return SplatRequest.create((0.5, 0.5), (float(i), 0.0), (1.0, 1.0, 1.0))


def test_flush_drains_in_insertion_order():
    queue = SplatQueue()
    for i in range(5):
        queue.enqueue(make_request(i))
    assert len(queue) == 5

    flushed = queue.flush_all()
    assert [r.force[0] for r in flushed] == [0.0, 1.0, 2.0, 3.0, 4.0]
    assert len(queue) == 0
    assert queue.flush_all() == []


def test_enqueue_after_flush_goes_to_next_batch():
    queue = SplatQueue()
    queue.enqueue(make_request(0))
    first = queue.flush_all()
    queue.enqueue(make_request(1))
    second = queue.flush_all()
    assert [r.force[0] for r in first] == [0.0]
    assert [r.force[0] for r in second] == [1.0]


def test_concurrent_producers_lose_and_duplicate_nothing():
    queue = SplatQueue()
    n_producers, per_producer = 4, 500
    flushed = []

    def produce(offset):
        for i in range(per_producer):
            queue.enqueue(make_request(offset * per_producer + i))

    threads = [threading.Thread(target=produce, args=(k,)) for k in range(n_producers)]
    for t in threads:
        t.start()
    while any(t.is_alive() for t in threads):
        flushed.extend(queue.flush_all())
    for t in threads:
        t.join()
    flushed.extend(queue.flush_all())

    ids = sorted(int(r.force[0]) for r in flushed)
    assert ids == list(range(n_producers * per_producer))


def test_request_is_immutable():
    request = make_request(0)
    with pytest.raises(AttributeError):
        request.uv = (0.0, 0.0)


def test_request_validates_component_counts():
    with pytest.raises(ValueError):
        SplatRequest.create((0.5,), (1.0, 0.0), (1.0, 1.0, 1.0))
    with pytest.raises(ValueError):
        SplatRequest.create((0.5, 0.5), (1.0, 0.0), (1.0, 1.0))
