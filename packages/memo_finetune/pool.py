"""Fixed-size worker pool over a sequence of items.

``bounded_map`` keeps at most ``concurrency`` calls of ``worker`` in flight by
submitting into a ``ThreadPoolExecutor`` through a sliding window: the window
is primed with ``concurrency`` items and topped up by one for every completion.
Results come back in input order.

Fail-fast only: on the first worker error no further items are submitted,
not-yet-started futures are cancelled, in-flight calls are allowed to finish
and the error is re-raised to the caller.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import TypeVar

InT = TypeVar("InT")
OutT = TypeVar("OutT")


def bounded_map(
    items: Iterable[InT],
    worker: Callable[[InT], OutT],
    *,
    concurrency: int,
    thread_name_prefix: str = "mf-worker",
) -> list[OutT]:
    """Apply ``worker`` to every item with at most ``concurrency`` in flight."""

    if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
        raise ValueError("concurrency must be a positive integer")

    # Lazily consumed so the window, not the input size, bounds submissions.
    pending = enumerate(items)
    results: dict[int, OutT] = {}
    owner: dict[Future[OutT], int] = {}

    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix=thread_name_prefix) as pool:

        def _submit_next() -> Future[OutT] | None:
            try:
                idx, item = next(pending)
            except StopIteration:
                return None
            fut = pool.submit(worker, item)
            owner[fut] = idx
            return fut

        active: set[Future[OutT]] = set()
        for _ in range(concurrency):
            fut = _submit_next()
            if fut is None:
                break
            active.add(fut)

        while active:
            done, active = wait(active, return_when=FIRST_COMPLETED)
            for fut in done:
                idx = owner.pop(fut)
                exc = fut.exception()
                if exc is not None:
                    # Stop admitting work; running calls drain on executor exit.
                    pool.shutdown(wait=False, cancel_futures=True)
                    raise exc
                results[idx] = fut.result()

            for _ in range(len(done)):
                fut = _submit_next()
                if fut is None:
                    break
                active.add(fut)

    return [results[i] for i in range(len(results))]


__all__ = ["bounded_map"]
