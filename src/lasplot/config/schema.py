# src/lasplot/config/schema.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

DEFAULT_COLORS: Tuple[str, ...] = (
    "1F77B4",
    "D62728",
    "2CA02C",
    "FF7F0E",
    "9467BD",
    "8C564B",
)


@dataclass(frozen=True)
class ServerConfig:
    bind_address: str = "127.0.0.1"
    bind_port: int = 8080


@dataclass(frozen=True)
class InputsConfig:
    samples_dir: Path = Path("samples")
    # Optional text file listing extra sources (names under samples_dir or URLs), one per line
    laslist_file: Path = Path("lasfiles.txt")


@dataclass(frozen=True)
class RenderConfig:
    html_row_steps: int = 100
    pixels_per_step: int = 2
    image_width: int = 1000
    scale_spacing: int = 20
    max_scales: int = 6
    tick_size_major: int = 8
    tick_size_minor: int = 4
    default_colors: Tuple[str, ...] = DEFAULT_COLORS
    separate_depth_column: bool = True
    render_workers: int = 2
    # Left margin reserved for depth labels / scale names; curves map onto [plot_x_start, image_width]
    plot_x_start: int = 100
    line_width: float = 1.0
    guide_alpha: float = 0.25
    draw_guides: bool = True
    scale_labels: bool = True

    def validate(self) -> None:
        for name in ("html_row_steps", "pixels_per_step", "image_width", "scale_spacing", "render_workers"):
            v = int(getattr(self, name))
            if v <= 0:
                raise ValueError(f"render.{name} must be > 0 (got {v!r})")
        for name in ("max_scales", "tick_size_major", "tick_size_minor", "plot_x_start"):
            v = int(getattr(self, name))
            if v < 0:
                raise ValueError(f"render.{name} must be >= 0 (got {v!r})")
        if int(self.plot_x_start) >= int(self.image_width):
            raise ValueError(
                f"render.plot_x_start ({self.plot_x_start}) must be < render.image_width ({self.image_width})"
            )
        if not (0.0 <= float(self.guide_alpha) <= 1.0):
            raise ValueError(f"render.guide_alpha must be in [0, 1] (got {self.guide_alpha!r})")
        if float(self.line_width) <= 0.0:
            raise ValueError(f"render.line_width must be > 0 (got {self.line_width!r})")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    inputs: InputsConfig = field(default_factory=InputsConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
