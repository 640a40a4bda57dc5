# src/lasplot/cli/main.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich import print

from lasplot.config.defaults import default_config_path
from lasplot.config.schema import AppConfig
from lasplot.errors import LasPlotError
from lasplot.io.source import list_sample_files, load_dataset
from lasplot.utils.config import load_app_config
from lasplot.utils.log import setup_logging
from lasplot.viz.colors import parse_color_list
from lasplot.viz.document import DocumentComposer, prepare_plot
from lasplot.viz.plot import PlotLayout

app = typer.Typer(add_completion=False, help="Paginated raster plots of well-log curves.")


def _config(path: Optional[Path]) -> AppConfig:
    cfg = load_app_config(path if path is not None else default_config_path())
    setup_logging(cfg.logging.level)
    return cfg


@app.command()
def serve(
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config (default: $LASPLOT_CONFIG or ./lasplot.yaml)"),
    host: Optional[str] = typer.Option(None, help="Override server.bind_address"),
    port: Optional[int] = typer.Option(None, help="Override server.bind_port"),
):
    """Run the HTTP server."""
    import uvicorn

    from lasplot.web.app import create_app

    cfg = _config(config)
    bind_host = host or cfg.server.bind_address
    bind_port = int(port or cfg.server.bind_port)
    print(f"[bold]Starting lasplot server on[/bold] http://{bind_host}:{bind_port}")
    uvicorn.run(create_app(cfg), host=bind_host, port=bind_port, log_config=None)


@app.command()
def render(
    file: str = typer.Argument(..., help="Sample file name (under inputs.samples_dir) or http(s) URL"),
    out: Path = typer.Option(Path("plot.html"), "-o", "--out", help="Output HTML path"),
    colors: Optional[str] = typer.Option(None, help="Comma-separated hex colors"),
    main_param: Optional[str] = typer.Option(None, "--main-param", help="Depth curve mnemonic"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config"),
):
    """Render one source to an HTML file, streaming rows to disk."""
    cfg = _config(config)
    explicit = parse_color_list(colors) if colors is not None else tuple(cfg.render.default_colors)

    try:
        dataset = load_dataset(file, cfg.inputs.samples_dir)
        plot = prepare_plot(dataset, main_param=main_param, explicit_colors=explicit)
    except LasPlotError as e:
        print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    composer = DocumentComposer(
        plot,
        PlotLayout.from_render_config(cfg.render),
        separate_depth_column=cfg.render.separate_depth_column,
    )
    out.parent.mkdir(parents=True, exist_ok=True)
    tmp = out.with_suffix(out.suffix + ".tmp")
    try:
        with tmp.open("w", encoding="utf-8") as f:
            for chunk in composer.iter_chunks(workers=cfg.render.render_workers):
                f.write(chunk)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    tmp.replace(out)
    print(f"[green]Wrote[/green] {out} ({len(composer.blocks)} row blocks)")


@app.command()
def files(
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config"),
):
    """List the sample files the server would offer."""
    cfg = _config(config)
    names = list_sample_files(cfg.inputs.samples_dir, cfg.inputs.laslist_file)
    if not names:
        print(f"[yellow]No sample files under[/yellow] {cfg.inputs.samples_dir}")
        return
    for n in names:
        print(n)


if __name__ == "__main__":
    app()
