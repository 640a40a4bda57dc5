# src/lasplot/utils/log.py
"""
Centralized logging for lasplot.

Usage:
    from lasplot.utils.log import get_logger

    logger = get_logger(__name__)
    logger.info("Rendering %d row blocks", n_rows)
"""

from __future__ import annotations

import logging

from rich.logging import RichHandler

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once (CLI / server startup). Subsequent calls are no-ops."""
    global _configured
    if _configured:
        return

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(name)s: %(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
