import threading

import pytest

from waitlist.position_counter import PositionCounter


def test_positions_start_at_one_and_increase():
    counter = PositionCounter()

    assert [counter.next() for _ in range(3)] == [1, 2, 3]
    assert counter.peek() == 4


def test_start_must_be_positive():
    with pytest.raises(ValueError):
        PositionCounter(start=0)


def test_concurrent_callers_never_share_a_position():
    counter = PositionCounter()
    results = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(8)

    def worker():
        barrier.wait()
        taken = [counter.next() for _ in range(250)]
        with results_lock:
            results.extend(taken)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(results) == 2000
    assert sorted(results) == list(range(1, 2001))
