# src/lasplot/config/defaults.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from .schema import AppConfig, InputsConfig

CONFIG_ENV_VAR = "LASPLOT_CONFIG"
DEFAULT_CONFIG_NAME = "lasplot.yaml"


def default_config() -> AppConfig:
    base = Path.cwd()
    return AppConfig(
        inputs=InputsConfig(
            samples_dir=base / "samples",
            laslist_file=base / "lasfiles.txt",
        )
    )


def default_config_path() -> Optional[Path]:
    """
    $LASPLOT_CONFIG if set, else ./lasplot.yaml when present, else None (built-in defaults).
    """
    env = (os.environ.get(CONFIG_ENV_VAR) or "").strip()
    if env:
        return Path(env)
    p = Path.cwd() / DEFAULT_CONFIG_NAME
    return p if p.exists() else None
