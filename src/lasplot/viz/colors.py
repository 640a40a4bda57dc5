# src/lasplot/viz/colors.py
from __future__ import annotations

import re
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Mapping, Sequence, Tuple

from lasplot.io.dataset import CurveInfo
from lasplot.utils.hash_utils import stable_hash64

RGBColor = Tuple[int, int, int]

# Channel floor for generated colors; keeps curves readable on white.
MIN_CHANNEL = 50

_HEX_PAIR_RE = re.compile(r"[0-9A-Fa-f]{2}")


def hex_to_rgb(h: str) -> RGBColor:
    """
    'FF0000' / '#ff0000' -> (255, 0, 0). Fewer than six digits -> black;
    a malformed channel reads as 0.
    """
    s = (h or "").strip().lstrip("#")
    if len(s) < 6:
        return (0, 0, 0)

    def _channel(part: str) -> int:
        if not _HEX_PAIR_RE.fullmatch(part):
            return 0
        return int(part, 16)

    return (_channel(s[0:2]), _channel(s[2:4]), _channel(s[4:6]))


def rgb_to_hex(rgb: Sequence[int]) -> str:
    r, g, b = (int(c) & 0xFF for c in rgb[:3])
    return f"{r:02X}{g:02X}{b:02X}"


def normalize_hex(h: str) -> str:
    """
    Canonical display form (upper case, no '#') of whatever hex_to_rgb would draw.
    """
    return rgb_to_hex(hex_to_rgb(h))


@lru_cache(maxsize=4096)
def fallback_color(index: int, name: str) -> str:
    """
    Deterministic color for a curve without an explicit one: hash of (index, name),
    low three bytes as r/g/b, each clamped to MIN_CHANNEL.
    """
    seed = stable_hash64(f"{int(index)}:{name}")
    r = max(seed & 0xFF, MIN_CHANNEL)
    g = max((seed >> 8) & 0xFF, MIN_CHANNEL)
    b = max((seed >> 16) & 0xFF, MIN_CHANNEL)
    return rgb_to_hex((r, g, b))


def parse_color_list(raw: str) -> Tuple[str, ...]:
    """
    'FF0000, 00ff00,,#0000FF' -> ('FF0000', '00ff00', '', '#0000FF'); positions are kept.
    """
    if raw is None:
        return ()
    return tuple(s.strip() for s in str(raw).split(","))


def resolve_curve_colors(
    explicit: Sequence[str],
    curves: Sequence[CurveInfo],
    *,
    main_index: int,
    plotted: Iterable[int],
) -> Mapping[int, str]:
    """
    One pass over the plotted curves (dataset order, main curve excluded): the k-th one
    takes explicit[k] when given, else its hash color. Returns an immutable
    curve_index -> hex mapping shared by the legend and the renderer.
    """
    wanted = set(int(i) for i in plotted)
    out = {}
    k = 0
    for idx, curve in enumerate(curves):
        if idx == int(main_index) or idx not in wanted:
            continue
        given = explicit[k] if k < len(explicit) else ""
        out[idx] = normalize_hex(given) if given else fallback_color(idx, curve.mnemonic)
        k += 1
    return MappingProxyType(out)
