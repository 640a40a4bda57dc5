# src/lasplot/viz/plot.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from lasplot.config.schema import RenderConfig
from lasplot.viz.canvas import RasterCanvas
from lasplot.viz.colors import RGBColor, hex_to_rgb
from lasplot.viz.scale import (
    TickPixels,
    ValueRange,
    linear_map,
    tick_layout,
    tick_pixels,
)

LABEL_FONT_SIZE = 10.0


class PlotMode(str, Enum):
    SCALES = "scales"
    CURVES = "curves"


@dataclass(frozen=True)
class PlotLayout:
    width: int = 1000
    plot_x_start: int = 100
    pixels_per_step: int = 2
    rows_per_block: int = 100
    scale_spacing: int = 20
    max_scales: int = 6
    tick_size_major: int = 8
    tick_size_minor: int = 4
    line_width: float = 1.0
    guide_alpha: float = 0.25
    draw_guides: bool = True
    scale_labels: bool = True

    @property
    def plot_width(self) -> float:
        return float(self.width - self.plot_x_start)

    @property
    def block_height(self) -> int:
        return int(self.rows_per_block) * int(self.pixels_per_step)

    @classmethod
    def from_render_config(cls, cfg: RenderConfig) -> "PlotLayout":
        return cls(
            width=int(cfg.image_width),
            plot_x_start=int(cfg.plot_x_start),
            pixels_per_step=int(cfg.pixels_per_step),
            rows_per_block=int(cfg.html_row_steps),
            scale_spacing=int(cfg.scale_spacing),
            max_scales=int(cfg.max_scales),
            tick_size_major=int(cfg.tick_size_major),
            tick_size_minor=int(cfg.tick_size_minor),
            line_width=float(cfg.line_width),
            guide_alpha=float(cfg.guide_alpha),
            draw_guides=bool(cfg.draw_guides),
            scale_labels=bool(cfg.scale_labels),
        )

    def x_of(self, value: float, rng: ValueRange) -> float:
        return linear_map(value, rng, float(self.plot_x_start), self.plot_width)

    def ticks_for(self, rng: Optional[ValueRange]) -> TickPixels:
        return tick_pixels(tick_layout(rng), rng, float(self.plot_x_start), self.plot_width)


@dataclass(frozen=True)
class CurveTrack:
    """
    One plotted curve: its dataset column, display color, value range and series
    (NaN = no measurement).
    """

    curve_index: int
    mnemonic: str
    color_hex: str
    value_range: ValueRange
    values: np.ndarray = field(repr=False, compare=False)

    @property
    def rgb(self) -> RGBColor:
        return hex_to_rgb(self.color_hex)


@dataclass(frozen=True)
class PlotSpec:
    width: int
    height: int
    mode: PlotMode
    tracks: Tuple[CurveTrack, ...]
    depth_range: ValueRange
    layout: PlotLayout


def _format_value(v: float) -> str:
    return f"{v:.2f}"


# -------------------------
# Scale strip
# -------------------------

def draw_scale_strip(canvas: RasterCanvas, spec: PlotSpec) -> None:
    """
    One horizontal rule per track (first max_scales, dataset order) with major/minor ticks.
    """
    lay = spec.layout
    x_start = float(lay.plot_x_start)
    x_end = float(spec.width)

    for k, track in enumerate(spec.tracks[: max(0, int(lay.max_scales))]):
        y = float(lay.scale_spacing * (k + 1))
        if y >= spec.height:
            break
        rgb = track.rgb
        canvas.stroke_line(x_start, y, x_end, y, rgb, width=lay.line_width)

        ticks = lay.ticks_for(track.value_range)
        for size, columns in ((lay.tick_size_major, ticks.major), (lay.tick_size_minor, ticks.minor)):
            half = float(size) / 2.0
            for x in columns:
                canvas.stroke_line(float(x), y - half, float(x), y + half, rgb, width=lay.line_width)

        if lay.scale_labels:
            base = y - float(lay.tick_size_major) / 2.0 - 2.0
            canvas.draw_text(4.0, y + LABEL_FONT_SIZE / 2.0 - 1.0, track.mnemonic, rgb, size=LABEL_FONT_SIZE)
            lo_s = _format_value(track.value_range.lo)
            hi_s = _format_value(track.value_range.hi)
            canvas.draw_text(x_start + 2.0, base, lo_s, rgb, size=LABEL_FONT_SIZE)
            hi_w = canvas.text_width(hi_s, size=LABEL_FONT_SIZE)
            canvas.draw_text(x_end - hi_w - 2.0, base, hi_s, rgb, size=LABEL_FONT_SIZE)


# -------------------------
# Curve window
# -------------------------

@dataclass(frozen=True)
class DepthWindow:
    """
    Valid-depth rows of [start, end) with the depth range used for the vertical axis
    and the pixel extent it maps onto.
    """

    indices: np.ndarray
    depths: np.ndarray
    depth_range: ValueRange
    extent: float

    @property
    def is_empty(self) -> bool:
        return int(self.indices.size) == 0


def depth_window(
    depth: np.ndarray,
    start: int,
    end: int,
    *,
    fallback: ValueRange,
    pixels_per_step: int,
    height: int,
) -> DepthWindow:
    """
    Rows with a finite depth in [start, end). The window's own min/max drive the y axis
    (fallback range when nothing is valid); every sample step takes pixels_per_step pixels,
    capped at the canvas height.
    """
    d = np.asarray(depth, dtype="float64")
    lo = max(0, int(start))
    hi = min(int(end), int(d.shape[0]))
    if hi <= lo:
        empty = np.empty((0,), dtype="int64")
        return DepthWindow(empty, np.empty((0,), dtype="float64"), fallback, float(height))

    idx = np.arange(lo, hi, dtype="int64")
    seg = d[lo:hi]
    ok = np.isfinite(seg)
    idx = idx[ok]
    seg = seg[ok]
    if idx.size == 0:
        return DepthWindow(idx, seg, fallback, float(height))

    rng = ValueRange(float(seg.min()), float(seg.max()))
    steps = int(idx[-1] - idx[0])
    extent = float(min(int(height), steps * int(pixels_per_step))) if pixels_per_step > 0 else float(height)
    return DepthWindow(idx, seg, rng, extent)


def _inside(x: float, y: float, width: int, height: int) -> bool:
    return 0.0 <= x <= float(width) and 0.0 <= y <= float(height)


def curve_runs(
    track: CurveTrack,
    window: DepthWindow,
    *,
    layout: PlotLayout,
    width: int,
    height: int,
) -> List[List[Tuple[float, float]]]:
    """
    Pixel polylines for one track. A NaN value ends the current run (gaps are never bridged);
    so does a point outside the canvas, which is itself not drawn.
    Single-point runs draw nothing.
    """
    runs: List[List[Tuple[float, float]]] = []
    cur: List[Tuple[float, float]] = []

    def _flush() -> None:
        nonlocal cur
        if len(cur) >= 2:
            runs.append(cur)
        cur = []

    values = track.values
    n_values = int(values.shape[0])
    for data_idx, dep in zip(window.indices.tolist(), window.depths.tolist()):
        if data_idx >= n_values:
            continue
        v = float(values[data_idx])
        if not math.isfinite(v):
            _flush()
            continue
        x = layout.x_of(v, track.value_range)
        y = linear_map(dep, window.depth_range, 0.0, window.extent)
        if not _inside(x, y, width, height):
            _flush()
            continue
        cur.append((x, y))
    _flush()
    return runs


def draw_guides(canvas: RasterCanvas, spec: PlotSpec) -> None:
    """
    Faint vertical lines at each major tick of the first max_scales tracks, under the curves.
    """
    lay = spec.layout
    for track in spec.tracks[: max(0, int(lay.max_scales))]:
        ticks = lay.ticks_for(track.value_range)
        for x in ticks.major:
            canvas.stroke_line(
                float(x), 0.0, float(x), float(spec.height), track.rgb, width=lay.line_width, alpha=lay.guide_alpha
            )


def draw_curve_window(
    canvas: RasterCanvas,
    spec: PlotSpec,
    depth: np.ndarray,
    start: int,
    end: int,
) -> None:
    lay = spec.layout
    window = depth_window(
        depth,
        start,
        end,
        fallback=spec.depth_range,
        pixels_per_step=lay.pixels_per_step,
        height=spec.height,
    )
    if window.is_empty:
        return

    if lay.draw_guides and lay.guide_alpha > 0.0:
        draw_guides(canvas, spec)

    # Last to first: earlier curves end up on top.
    for track in reversed(spec.tracks):
        for run in curve_runs(track, window, layout=lay, width=spec.width, height=spec.height):
            canvas.stroke_polyline(run, track.rgb, width=lay.line_width)


def render_plot(
    spec: PlotSpec,
    depth: Optional[np.ndarray] = None,
    start: int = 0,
    end: int = 0,
) -> RasterCanvas:
    canvas = RasterCanvas(spec.width, spec.height)
    if spec.mode is PlotMode.SCALES:
        draw_scale_strip(canvas, spec)
    else:
        if depth is None:
            raise ValueError("curve rendering needs the depth series")
        draw_curve_window(canvas, spec, depth, start, end)
    return canvas


def render_plot_png(
    spec: PlotSpec,
    depth: Optional[np.ndarray] = None,
    start: int = 0,
    end: int = 0,
) -> bytes:
    return render_plot(spec, depth, start, end).to_png()


def make_spec(
    mode: PlotMode,
    *,
    height: int,
    tracks: Sequence[CurveTrack],
    depth_range: ValueRange,
    layout: PlotLayout,
) -> PlotSpec:
    return PlotSpec(
        width=int(layout.width),
        height=int(height),
        mode=mode,
        tracks=tuple(tracks),
        depth_range=depth_range,
        layout=layout,
    )
