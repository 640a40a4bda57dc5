# src/lasplot/viz/scale.py
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class ValueRange:
    lo: float
    hi: float

    @property
    def span(self) -> float:
        return float(self.hi) - float(self.lo)

    @property
    def is_degenerate(self) -> bool:
        return not (math.isfinite(self.lo) and math.isfinite(self.hi)) or not (self.hi > self.lo)

    def as_tuple(self) -> Tuple[float, float]:
        return (float(self.lo), float(self.hi))


def value_range(values: np.ndarray) -> Optional[ValueRange]:
    """
    (min, max) over finite entries; None when nothing is finite.
    """
    arr = np.asarray(values, dtype="float64")
    finite = arr[np.isfinite(arr)]
    if finite.size == 0:
        return None
    return ValueRange(float(finite.min()), float(finite.max()))


def linear_map(value: float, rng: ValueRange, origin: float, extent: float) -> float:
    """
    origin + (value - lo) / (hi - lo) * extent.

    A zero-width (or non-finite) range maps every value to origin instead of dividing by zero.
    """
    span = rng.span
    if not math.isfinite(span) or span == 0.0:
        return float(origin)
    return float(origin) + (float(value) - float(rng.lo)) / span * float(extent)


@dataclass(frozen=True)
class TickLayout:
    major_step: float = 0.0
    minor_step: float = 0.0
    major: Tuple[float, ...] = ()
    minor: Tuple[float, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.major and not self.minor


EMPTY_TICKS = TickLayout()


def _step_indices(lo: float, hi: float, step: float) -> range:
    """
    Integer k with lo < k*step <= hi.
    """
    k0 = math.ceil(lo / step)
    if k0 * step <= lo:
        k0 += 1
    k1 = math.floor(hi / step)
    return range(int(k0), int(k1) + 1)


def tick_layout(rng: Optional[ValueRange]) -> TickLayout:
    """
    Log10-decade ticks: major every 10**floor(log10(span)), minor every tenth of that.

    Ticks sit in (lo, hi]; the rule start already marks lo. Minor positions whose
    rounded index is a multiple of 10 belong to a major tick and are left out.
    Degenerate ranges give no ticks.
    """
    if rng is None or rng.is_degenerate:
        return EMPTY_TICKS

    decade = math.floor(math.log10(rng.span))
    major_step = 10.0 ** decade
    minor_step = 10.0 ** (decade - 1)

    major = tuple(k * major_step for k in _step_indices(rng.lo, rng.hi, major_step))

    minor: List[float] = []
    for k in _step_indices(rng.lo, rng.hi, minor_step):
        v = k * minor_step
        if int(round(v / minor_step)) % 10 == 0:
            continue
        minor.append(v)

    return TickLayout(major_step=major_step, minor_step=minor_step, major=major, minor=tuple(minor))


@dataclass(frozen=True)
class TickPixels:
    major: Tuple[int, ...] = ()
    minor: Tuple[int, ...] = ()


def tick_pixels(layout: TickLayout, rng: Optional[ValueRange], origin: float, extent: float) -> TickPixels:
    """
    Pixel columns of a tick layout. A minor tick rounding onto a major column is dropped,
    so a column is never both.
    """
    if rng is None or layout.is_empty:
        return TickPixels()
    major = tuple(sorted({int(round(linear_map(v, rng, origin, extent))) for v in layout.major}))
    taken = set(major)
    minor = tuple(
        sorted({int(round(linear_map(v, rng, origin, extent))) for v in layout.minor} - taken)
    )
    return TickPixels(major=major, minor=minor)
