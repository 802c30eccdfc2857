from __future__ import annotations

import threading
import time

import pytest

from memo_finetune.pool import bounded_map


def test_results_preserve_input_order():
    def slow_square(n: int) -> int:
        time.sleep(0.001 * (10 - n))
        return n * n

    assert bounded_map(range(10), slow_square, concurrency=4) == [n * n for n in range(10)]


def test_never_exceeds_concurrency():
    lock = threading.Lock()
    inflight = 0
    peak = 0

    def work(_: int) -> None:
        nonlocal inflight, peak
        with lock:
            inflight += 1
            peak = max(peak, inflight)
        time.sleep(0.005)
        with lock:
            inflight -= 1

    bounded_map(range(40), work, concurrency=5)

    assert 1 <= peak <= 5


def test_first_error_stops_admission():
    seen: list[int] = []

    def work(n: int) -> int:
        seen.append(n)
        if n == 1:
            raise RuntimeError("boom")
        return n

    with pytest.raises(RuntimeError, match="boom"):
        bounded_map(range(10), work, concurrency=1)

    assert seen == [0, 1]


def test_empty_input():
    assert bounded_map([], lambda x: x, concurrency=3) == []


@pytest.mark.parametrize("bad", [0, -2, True, 1.5])
def test_rejects_invalid_concurrency(bad):
    with pytest.raises(ValueError, match="concurrency"):
        bounded_map([1], lambda x: x, concurrency=bad)
