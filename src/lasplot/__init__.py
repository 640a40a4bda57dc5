# src/lasplot/__init__.py
from __future__ import annotations

"""
lasplot

Well-log curve plots rendered as paginated PNG rows inside a streamed HTML document.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
