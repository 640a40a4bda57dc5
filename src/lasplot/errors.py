# src/lasplot/errors.py
from __future__ import annotations


class LasPlotError(RuntimeError):
    """Base class for request-level failures (reported once, never as a partial document)."""


class DatasetLoadError(LasPlotError):
    """Raised when a source cannot be fetched, read or parsed."""


class MainCurveNotFoundError(LasPlotError):
    """Raised when the requested depth (main) curve is not in the dataset."""

    def __init__(self, mnemonic: str) -> None:
        super().__init__(f"Main parameter '{mnemonic}' not found")
        self.mnemonic = mnemonic


class NothingToPlotError(LasPlotError):
    """Raised when no curve besides the main one carries plottable values."""
