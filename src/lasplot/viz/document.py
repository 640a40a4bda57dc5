# src/lasplot/viz/document.py
from __future__ import annotations

import asyncio
import base64
import html
from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from lasplot.errors import MainCurveNotFoundError, NothingToPlotError
from lasplot.io.dataset import LogDataset
from lasplot.utils.log import get_logger
from lasplot.viz.colors import resolve_curve_colors
from lasplot.viz.paginate import RowBlock, aordered_map, ordered_map, plan_row_blocks
from lasplot.viz.plot import CurveTrack, PlotLayout, PlotMode, make_spec, render_plot_png
from lasplot.viz.scale import ValueRange, value_range

logger = get_logger(__name__)

DOCUMENT_TITLE = "LAS Plot"


@dataclass(frozen=True)
class PlotRequest:
    """
    Everything one document render reads: validated once, shared read-only by all row renders.
    """

    dataset: LogDataset
    main_index: int
    depth: np.ndarray
    depth_range: ValueRange
    ranges: Tuple[Optional[ValueRange], ...]
    colors: Mapping[int, str]
    tracks: Tuple[CurveTrack, ...]

    @property
    def main_mnemonic(self) -> str:
        return self.dataset.curves[self.main_index].mnemonic


def prepare_plot(
    dataset: LogDataset,
    *,
    main_param: Optional[str] = None,
    explicit_colors: Sequence[str] = (),
) -> PlotRequest:
    """
    Resolve the depth curve, per-curve ranges and colors.

    Raises MainCurveNotFoundError / NothingToPlotError before anything is rendered.
    """
    if not dataset.curves:
        raise NothingToPlotError("Dataset has no curves")

    name = (main_param or "").strip() or dataset.curves[0].mnemonic
    main_index = dataset.curve_index(name)
    if main_index is None:
        raise MainCurveNotFoundError(name)

    series: List[np.ndarray] = [dataset.series(i) for i in range(len(dataset.curves))]
    for s in series:
        s.setflags(write=False)
    ranges = tuple(value_range(s) for s in series)

    depth = series[main_index]
    depth_range = ranges[main_index]
    if depth_range is None:
        raise NothingToPlotError("No depth data")

    plotted = [i for i, r in enumerate(ranges) if i != main_index and r is not None]
    if not plotted:
        raise NothingToPlotError("No curves to plot")

    colors = resolve_curve_colors(
        explicit_colors,
        dataset.curves,
        main_index=main_index,
        plotted=plotted,
    )
    tracks = tuple(
        CurveTrack(
            curve_index=i,
            mnemonic=dataset.curves[i].mnemonic,
            color_hex=colors[i],
            value_range=ranges[i],  # type: ignore[arg-type]
            values=series[i],
        )
        for i in plotted
    )
    return PlotRequest(
        dataset=dataset,
        main_index=main_index,
        depth=depth,
        depth_range=depth_range,
        ranges=ranges,
        colors=colors,
        tracks=tracks,
    )


def _png_data_uri(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def _e(s: object) -> str:
    return html.escape(str(s), quote=True)


class DocumentComposer:
    """
    Builds the paginated HTML document chunk by chunk:
    header (legend, well table, scale strip) -> one row per block -> closing tags.
    """

    def __init__(
        self,
        request: PlotRequest,
        layout: PlotLayout,
        *,
        separate_depth_column: bool = True,
        title: str = DOCUMENT_TITLE,
    ) -> None:
        self.request = request
        self.layout = layout
        self.separate_depth_column = bool(separate_depth_column)
        self.title = title
        self.blocks: List[RowBlock] = plan_row_blocks(
            request.depth,
            layout.rows_per_block,
            fallback_label=request.depth_range.lo,
        )
        self._curve_spec = make_spec(
            PlotMode.CURVES,
            height=layout.block_height,
            tracks=request.tracks,
            depth_range=request.depth_range,
            layout=layout,
        )

    # -------------------------
    # Header
    # -------------------------

    def legend_html(self) -> str:
        req = self.request
        out: List[str] = [
            "<table border='1' cellpadding='5' style='border-collapse: collapse; border: 1px solid #ccc;'>\n",
            "<tr><th>Color</th><th>Mnemonic</th><th>Measure</th><th>Description</th><th>min</th><th>max</th></tr>\n",
        ]
        for idx, curve in enumerate(req.dataset.curves):
            rng = req.ranges[idx]
            if rng is None:
                continue
            hex_color = req.colors.get(idx)
            if idx == req.main_index or hex_color is None:
                color_cell = "<td></td>"
            else:
                color_cell = (
                    f"<td style='background-color: #{hex_color}; color: black; "
                    f"text-align: center; font-weight: bold;'>{hex_color}</td>"
                )
            out.append(
                f"<tr>{color_cell}<td>{_e(curve.mnemonic)}</td><td>{_e(curve.unit)}</td>"
                f"<td>{_e(curve.description)}</td><td>{rng.lo:.2f}</td><td>{rng.hi:.2f}</td></tr>\n"
            )
        out.append("</table>\n")
        return "".join(out)

    def well_info_html(self) -> str:
        items = self.request.dataset.well_info
        if not items:
            return ""
        out: List[str] = [
            "<h2>Well</h2>\n",
            "<table border='1' cellpadding='5' style='border-collapse: collapse; border: 1px solid #ccc;'>\n",
            "<tr><th>Mnemonic</th><th>Unit</th><th>Value</th><th>Description</th></tr>\n",
        ]
        for it in items:
            out.append(
                f"<tr><td>{_e(it.mnemonic)}</td><td>{_e(it.unit)}</td>"
                f"<td>{_e(it.value)}</td><td>{_e(it.description)}</td></tr>\n"
            )
        out.append("</table>\n")
        return "".join(out)

    def scale_row_html(self) -> str:
        lay = self.layout
        row_height = lay.block_height
        spec = make_spec(
            PlotMode.SCALES,
            height=row_height,
            tracks=self.request.tracks,
            depth_range=self.request.depth_range,
            layout=lay,
        )
        img = (
            f"<img src='{_png_data_uri(render_plot_png(spec))}' alt='Scales' "
            f"width='{lay.width}' height='{row_height}'>"
        )
        if self.separate_depth_column:
            return f"<tr height='{row_height}'><td></td><td>{img}</td></tr>\n"
        return f"<tr height='{row_height}'><td>{img}</td></tr>\n"

    def header_chunk(self) -> str:
        name = self.request.dataset.name
        heading = f"{self.title} - {name}" if name else self.title
        parts = [
            f"<html><head><meta charset='utf-8'><title>{_e(heading)}</title>",
            "<style>table th, table td { border: 1px solid #ccc; }</style></head><body>\n",
            f"<h1>{_e(heading)}</h1>\n",
            self.legend_html(),
            self.well_info_html(),
            "<br>\n",
            "<table border='0' cellspacing='0' cellpadding='0'>\n",
            self.scale_row_html(),
        ]
        return "".join(parts)

    # -------------------------
    # Rows
    # -------------------------

    def render_block_png(self, block: RowBlock) -> bytes:
        return render_plot_png(self._curve_spec, self.request.depth, block.start, block.draw_end)

    def row_html(self, block: RowBlock) -> str:
        lay = self.layout
        height = lay.block_height
        img = (
            f"<img src='{_png_data_uri(self.render_block_png(block))}' alt='Plot' "
            f"width='{lay.width}' height='{height}'>"
        )
        label = f"{block.label_depth:.2f}"
        if self.separate_depth_column:
            return f"<tr height='{height}'><td valign='top'>{label}</td><td>{img}</td></tr>\n"
        return (
            f"<tr height='{height}'><td><div style='position:relative'>"
            f"<div style='position:absolute;left:5px;top:5px'>{label}</div>{img}</div></td></tr>\n"
        )

    def footer_chunk(self) -> str:
        return "</table>\n</body></html>\n"

    # -------------------------
    # Streams
    # -------------------------

    def _log_start(self, workers: int) -> None:
        logger.info(
            "Rendering %s: %d curves vs %s, %d row blocks (%d workers)",
            self.request.dataset.name or "<dataset>",
            len(self.request.tracks),
            self.request.main_mnemonic,
            len(self.blocks),
            workers,
        )

    def iter_chunks(self, *, workers: int = 2) -> Iterator[str]:
        self._log_start(workers)
        yield self.header_chunk()
        yield from ordered_map(self.row_html, self.blocks, workers=workers)
        yield self.footer_chunk()

    async def aiter_chunks(self, *, workers: int = 2) -> AsyncIterator[str]:
        self._log_start(workers)
        yield await asyncio.to_thread(self.header_chunk)
        async with aclosing(aordered_map(self.row_html, self.blocks, workers=workers)) as rows:
            async for row in rows:
                yield row
        yield self.footer_chunk()
