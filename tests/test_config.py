from __future__ import annotations

from pathlib import Path

import pytest

from lasplot.config.defaults import default_config
from lasplot.config.schema import RenderConfig
from lasplot.utils.config import app_config_from_dict, deep_get, load_app_config


def _write(p: Path, text: str) -> Path:
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    return p


def test_defaults() -> None:
    cfg = load_app_config(None)
    r = cfg.render
    assert (r.html_row_steps, r.pixels_per_step, r.image_width) == (100, 2, 1000)
    assert (r.max_scales, r.tick_size_major, r.tick_size_minor) == (6, 8, 4)
    assert cfg.server.bind_port == 8080


def test_yaml_overrides_and_relative_paths(tmp_path: Path) -> None:
    p = _write(
        tmp_path / "conf" / "lasplot.yaml",
        "\n".join(
            [
                "server:",
                "  bind_port: 9001",
                "inputs:",
                "  samples_dir: data",
                "render:",
                "  html_row_steps: 50",
                "  default_colors: 'FF0000, 00FF00'",
                "  separate_depth_column: 'no'",
                "  unknown_key: 1",
                "logging:",
                "  level: DEBUG",
            ]
        ),
    )
    cfg = load_app_config(p)
    assert cfg.server.bind_port == 9001
    assert cfg.inputs.samples_dir == (tmp_path / "conf" / "data").resolve()
    assert cfg.render.html_row_steps == 50
    assert cfg.render.default_colors == ("FF0000", "00FF00")
    assert cfg.render.separate_depth_column is False
    assert cfg.render.image_width == 1000
    assert cfg.logging.level == "DEBUG"


def test_invalid_render_values_rejected() -> None:
    with pytest.raises(ValueError, match="image_width"):
        app_config_from_dict({"render": {"image_width": 0}})
    with pytest.raises(ValueError, match="plot_x_start"):
        app_config_from_dict({"render": {"image_width": 100, "plot_x_start": 100}})
    with pytest.raises(ValueError):
        RenderConfig(guide_alpha=2.0).validate()


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_app_config(tmp_path / "absent.yaml")


def test_deep_get() -> None:
    d = {"a": {"b": {"c": 1}}}
    assert deep_get(d, "a.b.c") == 1
    assert deep_get(d, "a.x", 5) == 5


def test_default_config_uses_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert default_config().inputs.samples_dir == tmp_path / "samples"
