# src/lasplot/viz/paginate.py
from __future__ import annotations

import asyncio
import math
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Deque, Iterable, Iterator, List, Optional, TypeVar

import numpy as np

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class RowBlock:
    """
    One row of the paginated document.

    [start, end) are the samples the block owns (blocks tile the depth axis exactly);
    draw_end may reach one sample further so the curves meet the next block's first point.
    """

    index: int
    start: int
    end: int
    draw_end: int
    label_depth: float

    @property
    def n_samples(self) -> int:
        return self.end - self.start

    @property
    def shares_boundary(self) -> bool:
        return self.draw_end > self.end


def count_row_blocks(total_samples: int, rows_per_block: int) -> int:
    if rows_per_block <= 0:
        raise ValueError(f"rows_per_block must be > 0 (got {rows_per_block!r})")
    return int(math.ceil(max(0, int(total_samples)) / int(rows_per_block)))


def _first_finite(a: np.ndarray) -> Optional[float]:
    ok = np.flatnonzero(np.isfinite(a))
    if ok.size == 0:
        return None
    return float(a[int(ok[0])])


def plan_row_blocks(depth: np.ndarray, rows_per_block: int, *, fallback_label: float) -> List[RowBlock]:
    """
    Split the depth axis into ceil(n / rows_per_block) blocks. A non-last block whose next
    sample has a valid depth is widened by that one sample for drawing only.
    """
    d = np.asarray(depth, dtype="float64")
    n = int(d.shape[0])
    num_rows = count_row_blocks(n, rows_per_block)

    out: List[RowBlock] = []
    for row_idx in range(num_rows):
        start = row_idx * int(rows_per_block)
        end = min(start + int(rows_per_block), n)
        draw_end = end
        if row_idx < num_rows - 1 and end < n and math.isfinite(float(d[end])):
            draw_end = end + 1
        label = _first_finite(d[start:end])
        out.append(
            RowBlock(
                index=row_idx,
                start=start,
                end=end,
                draw_end=draw_end,
                label_depth=float(fallback_label) if label is None else label,
            )
        )
    return out


# -------------------------
# Bounded, order-preserving map
# -------------------------

def ordered_map(
    fn: Callable[[T], R],
    items: Iterable[T],
    *,
    workers: int = 2,
    executor: Optional[ThreadPoolExecutor] = None,
) -> Iterator[R]:
    """
    Yield fn(item) in input order while at most `workers` calls run ahead.

    Closing the iterator early cancels queued work; a failing call raises at its
    position and nothing after it is yielded.
    """
    k = max(1, int(workers))
    own = executor is None
    pool = ThreadPoolExecutor(max_workers=k, thread_name_prefix="lasplot-render") if own else executor
    pending: Deque[Future] = deque()
    it = iter(items)
    try:
        for item in it:
            pending.append(pool.submit(fn, item))
            if len(pending) >= k:
                break
        while pending:
            head = pending.popleft()
            result = head.result()
            nxt = next(it, _DONE)
            if nxt is not _DONE:
                pending.append(pool.submit(fn, nxt))
            yield result
    finally:
        for f in pending:
            f.cancel()
        if own:
            pool.shutdown(wait=False, cancel_futures=True)


async def aordered_map(
    fn: Callable[[T], R],
    items: Iterable[T],
    *,
    workers: int = 2,
) -> AsyncIterator[R]:
    """
    Async counterpart of ordered_map: calls run on a per-call thread pool, results are
    yielded strictly in input order. Cancelling or closing the generator abandons
    queued renders without waiting for running ones.
    """
    k = max(1, int(workers))
    loop = asyncio.get_running_loop()
    pool = ThreadPoolExecutor(max_workers=k, thread_name_prefix="lasplot-render")
    pending: Deque[asyncio.Future] = deque()
    it = iter(items)
    try:
        for item in it:
            pending.append(loop.run_in_executor(pool, fn, item))
            if len(pending) >= k:
                break
        while pending:
            result = await pending[0]
            pending.popleft()
            nxt = next(it, _DONE)
            if nxt is not _DONE:
                pending.append(loop.run_in_executor(pool, fn, nxt))
            yield result
    finally:
        for f in pending:
            f.cancel()
        pool.shutdown(wait=False, cancel_futures=True)


class _Done:
    pass


_DONE = _Done()
