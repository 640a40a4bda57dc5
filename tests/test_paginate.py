from __future__ import annotations

import asyncio
import random
import threading
import time

import numpy as np
import pytest

from lasplot.viz.paginate import aordered_map, count_row_blocks, ordered_map, plan_row_blocks


def test_count_row_blocks() -> None:
    assert count_row_blocks(10, 4) == 3
    assert count_row_blocks(8, 4) == 2
    assert count_row_blocks(0, 4) == 0
    with pytest.raises(ValueError):
        count_row_blocks(10, 0)


def test_plan_row_blocks_widens_all_but_last() -> None:
    depth = np.arange(10, dtype="float64")
    blocks = plan_row_blocks(depth, 4, fallback_label=-1.0)
    assert [(b.start, b.end, b.draw_end) for b in blocks] == [(0, 4, 5), (4, 8, 9), (8, 10, 10)]
    assert [b.index for b in blocks] == [0, 1, 2]
    assert [b.label_depth for b in blocks] == [0.0, 4.0, 8.0]


def test_blocks_tile_the_axis_exactly_once() -> None:
    depth = np.linspace(100.0, 200.0, 37)
    blocks = plan_row_blocks(depth, 5, fallback_label=0.0)
    owned = [i for b in blocks for i in range(b.start, b.end)]
    assert owned == list(range(37))
    assert sum(b.n_samples for b in blocks) == 37


def test_null_next_depth_is_not_shared() -> None:
    depth = np.array([0.0, 1.0, 2.0, np.nan, 4.0, 5.0])
    blocks = plan_row_blocks(depth, 3, fallback_label=0.0)
    assert blocks[0].draw_end == 3
    assert not blocks[0].shares_boundary


def test_label_falls_back_when_block_has_no_valid_depth() -> None:
    depth = np.array([1.0, 2.0, np.nan, np.nan])
    blocks = plan_row_blocks(depth, 2, fallback_label=1.0)
    assert blocks[0].label_depth == 1.0
    assert blocks[1].label_depth == 1.0

    depth = np.array([np.nan, 7.5, 8.0])
    assert plan_row_blocks(depth, 3, fallback_label=0.0)[0].label_depth == 7.5


def _slow_square(x: int) -> int:
    time.sleep(random.uniform(0.0, 0.01))
    return x * x


def test_ordered_map_keeps_input_order() -> None:
    out = list(ordered_map(_slow_square, range(25), workers=4))
    assert out == [x * x for x in range(25)]


def test_ordered_map_bounds_in_flight_work() -> None:
    lock = threading.Lock()
    running = 0
    peak = 0

    def _work(x: int) -> int:
        nonlocal running, peak
        with lock:
            running += 1
            peak = max(peak, running)
        time.sleep(0.005)
        with lock:
            running -= 1
        return x

    assert list(ordered_map(_work, range(12), workers=2)) == list(range(12))
    assert peak <= 2


def test_ordered_map_raises_at_failing_position() -> None:
    def _fn(x: int) -> int:
        if x == 3:
            raise ValueError("boom")
        return x

    got = []
    with pytest.raises(ValueError, match="boom"):
        for v in ordered_map(_fn, range(8), workers=3):
            got.append(v)
    assert got == [0, 1, 2]


def test_ordered_map_single_worker_and_empty() -> None:
    assert list(ordered_map(lambda x: x + 1, [1, 2, 3], workers=1)) == [2, 3, 4]
    assert list(ordered_map(lambda x: x, [], workers=2)) == []


def test_aordered_map_keeps_input_order() -> None:
    async def _collect():
        return [v async for v in aordered_map(_slow_square, range(20), workers=3)]

    assert asyncio.run(_collect()) == [x * x for x in range(20)]


def test_aordered_map_error_propagates() -> None:
    def _fn(x: int) -> int:
        if x == 2:
            raise KeyError(x)
        return x

    async def _collect():
        got = []
        async for v in aordered_map(_fn, range(6), workers=2):
            got.append(v)
        return got

    with pytest.raises(KeyError):
        asyncio.run(_collect())


class _StartCounter:
    def __init__(self, delay: float) -> None:
        self.delay = delay
        self.started = 0
        self._lock = threading.Lock()

    def __call__(self, x: int) -> int:
        with self._lock:
            self.started += 1
        if x > 0:
            time.sleep(self.delay)
        return x


def test_closing_ordered_map_cancels_queued_work() -> None:
    fn = _StartCounter(0.5)
    it = ordered_map(fn, range(50), workers=2)
    assert next(it) == 0

    t0 = time.monotonic()
    it.close()
    assert time.monotonic() - t0 < 0.25  # running renders are not awaited

    time.sleep(0.7)
    assert fn.started <= 4


def test_closing_aordered_map_cancels_queued_work() -> None:
    fn = _StartCounter(0.5)

    async def _first_then_close() -> int:
        gen = aordered_map(fn, range(50), workers=2)
        first = await gen.__anext__()
        await gen.aclose()
        await asyncio.sleep(0.7)
        return first

    assert asyncio.run(_first_then_close()) == 0
    assert fn.started <= 4
