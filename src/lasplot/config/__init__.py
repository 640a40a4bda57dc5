# src/lasplot/config/__init__.py
from __future__ import annotations

from .defaults import default_config
from .schema import AppConfig, InputsConfig, LoggingConfig, RenderConfig, ServerConfig

__all__ = [
    "AppConfig",
    "InputsConfig",
    "LoggingConfig",
    "RenderConfig",
    "ServerConfig",
    "default_config",
]
