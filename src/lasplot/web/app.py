# src/lasplot/web/app.py
"""
FastAPI application for lasplot.

Routes:
    GET /       render a LAS/CSV source as a streamed, paginated HTML plot
    GET /test   test page listing the available sample files
    GET /list   JSON list of the available sample files
"""

from __future__ import annotations

import html
import json
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, StreamingResponse

from lasplot import __version__
from lasplot.config.schema import AppConfig
from lasplot.errors import LasPlotError
from lasplot.io.dataset import LogDataset
from lasplot.io.source import fetch_url_text, is_url, list_sample_files, load_dataset, parse_dataset, source_name
from lasplot.utils.log import get_logger
from lasplot.viz.colors import parse_color_list
from lasplot.viz.document import DocumentComposer, prepare_plot
from lasplot.viz.plot import PlotLayout

logger = get_logger(__name__)

TEST_PAGE_BUTTONS = 4


async def load_request_dataset(ref: str, cfg: AppConfig) -> LogDataset:
    if is_url(ref):
        text = await fetch_url_text(ref)
        return await run_in_threadpool(parse_dataset, text, name=source_name(ref))
    return await run_in_threadpool(load_dataset, ref, cfg.inputs.samples_dir)


def _test_page(files: list[str]) -> str:
    def _js(s: str) -> str:
        return html.escape(json.dumps(s), quote=True)

    buttons = "\n        ".join(
        f"<button onclick=\"openFile({_js(f)})\">{html.escape(f)}</button>" for f in files[:TEST_PAGE_BUTTONS]
    )
    items = "\n            ".join(
        f"<li><a href=\"#\" onclick=\"openFile({_js(f)}); return false;\">{html.escape(f)}</a></li>" for f in files
    )
    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="UTF-8">
    <title>LAS Plot Test Page</title>
    <style>
        body {{ font-family: Arial, sans-serif; margin: 20px; }}
        .button-group {{ margin-bottom: 30px; }}
        .button-group button {{ margin: 5px; padding: 10px 20px; font-size: 16px; cursor: pointer; }}
        .file-list ul {{ list-style-type: none; padding: 0; }}
        .file-list li {{ margin: 5px 0; }}
        .file-list a {{ color: #0066cc; text-decoration: none; }}
        .file-list a:hover {{ text-decoration: underline; }}
    </style>
</head>
<body>
    <h1>LAS Plot Test Page</h1>

    <div class="button-group">
        <h2>Open in New Tabs (First {TEST_PAGE_BUTTONS} files):</h2>
        {buttons}
    </div>

    <div class="file-list">
        <h2>All LAS Files:</h2>
        <ul id="fileList">
            {items}
        </ul>
    </div>

    <script>
        function openFile(file) {{
            window.open('/?file=' + encodeURIComponent(file), '_blank');
        }}

        fetch('/list')
            .then(response => response.json())
            .then(data => {{
                const list = document.getElementById('fileList');
                list.innerHTML = '';
                data.files.forEach(file => {{
                    const li = document.createElement('li');
                    const a = document.createElement('a');
                    a.href = '#';
                    a.textContent = file;
                    a.onclick = (e) => {{ e.preventDefault(); openFile(file); }};
                    li.appendChild(a);
                    list.appendChild(li);
                }});
            }})
            .catch(error => console.error('Error loading file list:', error));
    </script>
</body>
</html>
"""


def create_app(config: AppConfig) -> FastAPI:
    config.render.validate()

    app = FastAPI(
        title="lasplot",
        description="Paginated raster plots of well-log (LAS) curves",
        version=__version__,
    )
    app.state.config = config

    @app.exception_handler(LasPlotError)
    async def lasplot_error_handler(request: Request, exc: LasPlotError):
        """Request-level failures: one 500 response, never a partial document."""
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.get("/")
    async def render_plot(
        request: Request,
        file: Optional[str] = Query(None, description="Sample file name or http(s) URL"),
        colors: Optional[str] = Query(None, description="Comma-separated hex colors"),
        main_param: Optional[str] = Query(None, description="Depth curve mnemonic (default: first curve)"),
    ):
        if not file:
            return RedirectResponse(url="/test", status_code=302)

        cfg: AppConfig = request.app.state.config
        explicit = parse_color_list(colors) if colors is not None else tuple(cfg.render.default_colors)

        dataset = await load_request_dataset(file, cfg)
        plot = await run_in_threadpool(prepare_plot, dataset, main_param=main_param, explicit_colors=explicit)

        composer = DocumentComposer(
            plot,
            PlotLayout.from_render_config(cfg.render),
            separate_depth_column=cfg.render.separate_depth_column,
        )
        return StreamingResponse(
            composer.aiter_chunks(workers=cfg.render.render_workers),
            media_type="text/html",
        )

    @app.get("/test", response_class=HTMLResponse)
    async def test_page(request: Request):
        cfg: AppConfig = request.app.state.config
        files = await run_in_threadpool(list_sample_files, cfg.inputs.samples_dir, cfg.inputs.laslist_file)
        return HTMLResponse(_test_page(files))

    @app.get("/list")
    async def list_files(request: Request):
        cfg: AppConfig = request.app.state.config
        files = await run_in_threadpool(list_sample_files, cfg.inputs.samples_dir, cfg.inputs.laslist_file)
        return {"files": files}

    return app
