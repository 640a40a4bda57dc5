from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from lasplot.cli.main import app

runner = CliRunner()


def _config(tmp_path: Path, samples_dir: Path) -> Path:
    p = tmp_path / "lasplot.yaml"
    p.write_text(
        "\n".join(
            [
                "inputs:",
                f"  samples_dir: {samples_dir}",
                "render:",
                "  html_row_steps: 5",
                "  image_width: 200",
                "  plot_x_start: 40",
                "  scale_labels: false",
                "logging:",
                "  level: WARNING",
            ]
        ),
        encoding="utf-8",
    )
    return p


def test_render_writes_html(tmp_path: Path, samples_dir: Path) -> None:
    out = tmp_path / "out" / "plot.html"
    res = runner.invoke(app, ["render", "small.las", "-o", str(out), "--config", str(_config(tmp_path, samples_dir))])
    assert res.exit_code == 0, res.output
    text = out.read_text(encoding="utf-8")
    assert text.count("alt='Plot'") == 2
    assert text.endswith("</body></html>\n")


def test_render_unknown_main_param_fails(tmp_path: Path, samples_dir: Path) -> None:
    out = tmp_path / "plot.html"
    res = runner.invoke(
        app,
        ["render", "small.las", "-o", str(out), "--main-param", "XYZ", "--config", str(_config(tmp_path, samples_dir))],
    )
    assert res.exit_code == 1
    assert "not found" in res.output
    assert not out.exists()


def test_files_lists_samples(tmp_path: Path, samples_dir: Path) -> None:
    res = runner.invoke(app, ["files", "--config", str(_config(tmp_path, samples_dir))])
    assert res.exit_code == 0
    assert "small.las" in res.output


def test_render_failure_leaves_no_partial_file(tmp_path: Path, samples_dir: Path, monkeypatch) -> None:
    from lasplot.viz.document import DocumentComposer

    real = DocumentComposer.render_block_png

    def _fail_second(self, block):
        if block.index == 1:
            raise RuntimeError("render failed")
        return real(self, block)

    monkeypatch.setattr(DocumentComposer, "render_block_png", _fail_second)
    out = tmp_path / "plot.html"
    res = runner.invoke(app, ["render", "small.las", "-o", str(out), "--config", str(_config(tmp_path, samples_dir))])
    assert res.exit_code != 0
    assert isinstance(res.exception, RuntimeError)
    assert not out.exists()
    assert not (tmp_path / "plot.html.tmp").exists()
