# src/lasplot/viz/__init__.py
from __future__ import annotations

"""
Plotting engine: colors, axis scaling, raster canvas, renderer, paginated document.

Keep this import-light; submodules pull in matplotlib/Pillow only when used.
"""

from importlib import import_module
from typing import Any

__all__ = [
    "DocumentComposer",
    "PlotRequest",
    "prepare_plot",
    "PlotLayout",
    "PlotMode",
    "render_plot_png",
]


def __getattr__(name: str) -> Any:
    if name in ("DocumentComposer", "PlotRequest", "prepare_plot"):
        m = import_module("lasplot.viz.document")
        return getattr(m, name)

    if name in ("PlotLayout", "PlotMode", "render_plot_png"):
        m = import_module("lasplot.viz.plot")
        return getattr(m, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
