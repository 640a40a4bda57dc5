# src/lasplot/viz/canvas.py
from __future__ import annotations

import io
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

try:
    from matplotlib.backends.backend_agg import RendererAgg  # type: ignore
    from matplotlib.font_manager import FontProperties  # type: ignore
    from matplotlib.path import Path as MplPath  # type: ignore
    from matplotlib.transforms import Affine2D  # type: ignore
except Exception as e:  # pragma: no cover
    raise RuntimeError("matplotlib is required. pip install matplotlib") from e

try:
    from PIL import Image  # type: ignore
except Exception as e:  # pragma: no cover
    raise RuntimeError("Pillow is required. pip install pillow") from e

RGB = Tuple[int, int, int]

# At 72 dpi one point is one pixel, so line widths and font sizes are in pixels.
_DPI = 72.0

WHITE: RGB = (255, 255, 255)


def _rgb01(color: Sequence[int]) -> Tuple[float, float, float]:
    return (color[0] / 255.0, color[1] / 255.0, color[2] / 255.0)


def permute_channels(buf: np.ndarray, src_order: str, dst_order: str) -> np.ndarray:
    """
    Per-pixel channel permutation of a packed (h, w, 4) buffer, e.g. BGRA -> RGBA.
    Returns a new contiguous array.
    """
    src = src_order.upper()
    dst = dst_order.upper()
    if sorted(src) != sorted(dst) or len(set(src)) != len(src):
        raise ValueError(f"cannot permute {src_order!r} into {dst_order!r}")
    arr = np.asarray(buf)
    if arr.ndim != 3 or arr.shape[2] != len(src):
        raise ValueError(f"expected (h, w, {len(src)}) buffer, got {arr.shape}")
    order = [src.index(c) for c in dst]
    return np.ascontiguousarray(arr[..., order])


class RasterCanvas:
    """
    Anti-aliased drawing surface in image coordinates (origin top-left, y down),
    backed by matplotlib's Agg renderer.
    """

    # Byte order of the Agg pixel buffer
    native_order = "RGBA"

    def __init__(self, width: int, height: int, *, background: Optional[RGB] = WHITE) -> None:
        w, h = int(width), int(height)
        if w <= 0 or h <= 0:
            raise ValueError(f"canvas size must be positive (got {w}x{h})")
        self.width = w
        self.height = h
        self._renderer = RendererAgg(w, h, _DPI)
        # image y (down) -> Agg display y (up)
        self._to_display = Affine2D().scale(1.0, -1.0).translate(0.0, float(h))
        if background is not None:
            self.fill(background)

    def _gc(self, color: Sequence[int], *, width: float = 1.0, alpha: float = 1.0):
        gc = self._renderer.new_gc()
        gc.set_antialiased(True)
        gc.set_linewidth(float(width))
        gc.set_capstyle("round")
        gc.set_joinstyle("round")
        if alpha < 1.0:
            gc.set_alpha(float(alpha))
        gc.set_foreground(_rgb01(color))
        return gc

    def fill(self, color: Sequence[int], alpha: float = 1.0) -> None:
        self.fill_rect(0.0, 0.0, float(self.width), float(self.height), color, alpha=alpha)

    def fill_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        color: Sequence[int],
        *,
        alpha: float = 1.0,
    ) -> None:
        if w <= 0 or h <= 0:
            return
        path = MplPath(
            np.array([[x, y], [x + w, y], [x + w, y + h], [x, y + h], [x, y]], dtype="float64"),
            closed=True,
        )
        gc = self._gc(color, width=0.0)
        try:
            self._renderer.draw_path(gc, path, self._to_display, (*_rgb01(color), float(alpha)))
        finally:
            gc.restore()

    def stroke_polyline(
        self,
        points: Iterable[Tuple[float, float]],
        color: Sequence[int],
        *,
        width: float = 1.0,
        alpha: float = 1.0,
    ) -> None:
        pts = np.asarray(list(points), dtype="float64")
        if pts.ndim != 2 or pts.shape[0] < 2:
            return
        gc = self._gc(color, width=width, alpha=alpha)
        try:
            self._renderer.draw_path(gc, MplPath(pts), self._to_display, None)
        finally:
            gc.restore()

    def stroke_line(
        self,
        x0: float,
        y0: float,
        x1: float,
        y1: float,
        color: Sequence[int],
        *,
        width: float = 1.0,
        alpha: float = 1.0,
    ) -> None:
        self.stroke_polyline([(x0, y0), (x1, y1)], color, width=width, alpha=alpha)

    def draw_text(self, x: float, y: float, text: str, color: Sequence[int], *, size: float = 10.0) -> None:
        """
        Text with its baseline-left corner at (x, y).
        """
        if not text:
            return
        gc = self._gc(color)
        try:
            # Agg text coordinates already run top-down (renderer.flipy() is True)
            self._renderer.draw_text(gc, float(x), float(y), str(text), FontProperties(size=float(size)), 0.0)
        finally:
            gc.restore()

    def text_width(self, text: str, *, size: float = 10.0) -> float:
        w, _h, _d = self._renderer.get_text_width_height_descent(
            str(text), FontProperties(size=float(size)), ismath=False
        )
        return float(w)

    def to_rgba(self) -> np.ndarray:
        """
        Packed (height, width, 4) uint8 RGBA copy with alpha forced opaque.
        """
        native = np.asarray(self._renderer.buffer_rgba())
        out = permute_channels(native, self.native_order, "RGBA")
        out[..., 3] = 255
        return out

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        Image.fromarray(self.to_rgba()).save(buf, format="PNG")
        return buf.getvalue()
