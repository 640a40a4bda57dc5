from __future__ import annotations

import io

import numpy as np
from PIL import Image

from lasplot.viz.plot import (
    CurveTrack,
    PlotLayout,
    PlotMode,
    curve_runs,
    depth_window,
    make_spec,
    render_plot,
    render_plot_png,
)
from lasplot.viz.scale import ValueRange


def _layout(**kw) -> PlotLayout:
    base = dict(
        width=200,
        plot_x_start=0,
        pixels_per_step=10,
        rows_per_block=10,
        scale_spacing=20,
        max_scales=6,
        tick_size_major=8,
        tick_size_minor=4,
        draw_guides=False,
        scale_labels=False,
    )
    base.update(kw)
    return PlotLayout(**base)


def _track(values, *, idx: int = 1, rng=(0.0, 100.0), color: str = "000000") -> CurveTrack:
    return CurveTrack(
        curve_index=idx,
        mnemonic=f"C{idx}",
        color_hex=color,
        value_range=ValueRange(*rng),
        values=np.asarray(values, dtype="float64"),
    )


def _is_white(px) -> bool:
    return list(px[:3]) == [255, 255, 255]


def test_depth_window_uses_own_range_and_step_extent() -> None:
    depth = np.array([10.0, 11.0, np.nan, 13.0, 14.0, 15.0])
    w = depth_window(depth, 0, 4, fallback=ValueRange(0.0, 1.0), pixels_per_step=3, height=100)
    assert w.indices.tolist() == [0, 1, 3]
    assert w.depth_range == ValueRange(10.0, 13.0)
    assert w.extent == 9.0  # three sample steps * 3 px

    empty = depth_window(np.array([np.nan, np.nan]), 0, 2, fallback=ValueRange(0.0, 1.0), pixels_per_step=3, height=50)
    assert empty.is_empty
    assert empty.depth_range == ValueRange(0.0, 1.0)


def test_depth_window_extent_capped_at_height() -> None:
    depth = np.arange(0.0, 50.0)
    w = depth_window(depth, 0, 50, fallback=ValueRange(0.0, 1.0), pixels_per_step=10, height=100)
    assert w.extent == 100.0


def test_null_sample_splits_the_curve_into_two_runs() -> None:
    depth = np.arange(10, dtype="float64")
    values = np.full(10, 50.0)
    values[4] = np.nan
    lay = _layout()
    w = depth_window(depth, 0, 10, fallback=ValueRange(0.0, 9.0), pixels_per_step=10, height=100)

    runs = curve_runs(_track(values), w, layout=lay, width=200, height=100)
    assert len(runs) == 2
    assert [p[1] for p in runs[0]] == [0.0, 10.0, 20.0, 30.0]
    assert [p[1] for p in runs[1]] == [50.0, 60.0, 70.0, 80.0, 90.0]


def test_null_gap_is_not_drawn_in_raster() -> None:
    depth = np.arange(10, dtype="float64")
    values = np.full(10, 50.0)
    values[4] = np.nan
    lay = _layout()
    spec = make_spec(PlotMode.CURVES, height=100, tracks=[_track(values)], depth_range=ValueRange(0.0, 9.0), layout=lay)

    rgba = render_plot(spec, depth, 0, 10).to_rgba()
    # line at x=100 above and below the gap
    assert not all(_is_white(px) for px in rgba[20, 97:104])
    assert not all(_is_white(px) for px in rgba[70, 97:104])
    # nothing across the gap (y=40 sits between the runs ending at 30 and starting at 50)
    assert all(_is_white(px) for px in rgba[40])


def test_out_of_canvas_point_is_skipped_without_aborting_curve() -> None:
    depth = np.arange(6, dtype="float64")
    values = np.array([10.0, 20.0, 500.0, 30.0, 40.0, 50.0])  # 500 maps far right of the canvas
    lay = _layout()
    w = depth_window(depth, 0, 6, fallback=ValueRange(0.0, 5.0), pixels_per_step=10, height=100)

    runs = curve_runs(_track(values), w, layout=lay, width=200, height=100)
    assert len(runs) == 2
    assert len(runs[0]) == 2 and len(runs[1]) == 3


def test_out_of_range_curve_index_is_skipped() -> None:
    depth = np.arange(10, dtype="float64")
    short = np.array([50.0, 50.0, 50.0])  # shorter than the depth axis
    lay = _layout()
    w = depth_window(depth, 0, 10, fallback=ValueRange(0.0, 9.0), pixels_per_step=10, height=100)

    runs = curve_runs(_track(short), w, layout=lay, width=200, height=100)
    assert len(runs) == 1
    assert len(runs[0]) == 3


def test_degenerate_curve_range_draws_at_origin() -> None:
    depth = np.arange(5, dtype="float64")
    lay = _layout(plot_x_start=20)
    w = depth_window(depth, 0, 5, fallback=ValueRange(0.0, 4.0), pixels_per_step=10, height=100)

    runs = curve_runs(_track(np.full(5, 3.0), rng=(3.0, 3.0)), w, layout=lay, width=200, height=100)
    assert len(runs) == 1
    assert {p[0] for p in runs[0]} == {20.0}


def test_curve_png_is_deterministic_and_sized() -> None:
    rs = np.random.default_rng(7)
    depth = np.linspace(1000.0, 1010.0, 21)
    tracks = [
        _track(rs.uniform(0, 100, 21), idx=1, color="D62728"),
        _track(rs.uniform(0, 100, 21), idx=2, color="1F77B4"),
    ]
    lay = _layout(draw_guides=True, guide_alpha=0.3)
    spec = make_spec(PlotMode.CURVES, height=lay.block_height, tracks=tracks, depth_range=ValueRange(1000.0, 1010.0), layout=lay)

    a = render_plot_png(spec, depth, 0, 11)
    b = render_plot_png(spec, depth, 0, 11)
    assert a == b
    img = Image.open(io.BytesIO(a))
    assert img.size == (200, 100)


def test_scale_strip_draws_one_rule_per_track_until_height() -> None:
    lay = _layout(scale_spacing=20)
    tracks = [
        _track([0.0], idx=1, rng=(0.0, 47.0), color="FF0000"),
        _track([0.0], idx=2, rng=(0.0, 47.0), color="0000FF"),
        _track([0.0], idx=3, rng=(0.0, 47.0), color="00FF00"),
    ]
    spec = make_spec(PlotMode.SCALES, height=30, tracks=tracks, depth_range=ValueRange(0.0, 1.0), layout=lay)
    rgba = render_plot(spec).to_rgba()

    # first rule at y=20 in red; second (y=40) falls outside a 30 px strip
    rule = rgba[19:22, 150]
    assert any(px[0] > px[2] and px[1] < 200 for px in rule)
    assert not any(px[2] > px[0] for px in rgba[:, 150])


def test_scale_strip_respects_max_scales() -> None:
    lay = _layout(scale_spacing=10, max_scales=1)
    tracks = [
        _track([0.0], idx=1, color="FF0000"),
        _track([0.0], idx=2, color="0000FF"),
    ]
    spec = make_spec(PlotMode.SCALES, height=60, tracks=tracks, depth_range=ValueRange(0.0, 1.0), layout=lay)
    rgba = render_plot(spec).to_rgba()
    assert all(_is_white(px) for px in rgba[18:23, 150])


def test_scale_strip_with_labels_renders() -> None:
    lay = _layout(plot_x_start=60, scale_labels=True)
    spec = make_spec(
        PlotMode.SCALES,
        height=40,
        tracks=[_track([0.0], rng=(1.5, 2.9), color="2CA02C")],
        depth_range=ValueRange(0.0, 1.0),
        layout=lay,
    )
    img = Image.open(io.BytesIO(render_plot_png(spec)))
    assert img.size == (200, 40)
