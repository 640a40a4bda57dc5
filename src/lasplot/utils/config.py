# src/lasplot/utils/config.py
from __future__ import annotations

from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import yaml  # type: ignore
except Exception:  # pragma: no cover
    yaml = None  # type: ignore

from lasplot.config.defaults import DEFAULT_CONFIG_NAME, default_config
from lasplot.config.schema import AppConfig


def require_yaml() -> None:
    if yaml is None:
        raise RuntimeError("PyYAML is required for --config. Install with: pip install pyyaml")


def _find_config_root(start: Path) -> Path:
    """
    Heuristic: walk up from start looking for a directory holding lasplot.yaml.
    Falls back to start if not found.
    """
    p = start.resolve()
    for _ in range(10):
        if (p / DEFAULT_CONFIG_NAME).exists():
            return p
        if p.parent == p:
            break
        p = p.parent
    return start.resolve()


def resolve_config_path(path: Path) -> Path:
    """
    Resolve config path robustly:
      1) as given (absolute or relative to CWD)
      2) relative to the nearest parent directory containing lasplot.yaml
    """
    p = Path(path)
    if p.exists():
        return p.resolve()

    root = _find_config_root(Path.cwd())
    p2 = (root / p).resolve()
    if p2.exists():
        return p2

    return p  # caller will raise with the original


def load_yaml(path: Path) -> Dict[str, Any]:
    require_yaml()
    p = resolve_config_path(Path(path))
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")
    obj = yaml.safe_load(p.read_text(encoding="utf-8"))
    return obj if isinstance(obj, dict) else {}


def deep_get(d: Dict[str, Any], key: str, default: Any = None) -> Any:
    cur: Any = d
    for part in key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def _coerce_like(template: Any, value: Any) -> Any:
    """
    Coerce a YAML scalar/list to the type of the dataclass default it replaces.
    """
    if isinstance(template, bool):
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)
    if isinstance(template, int):
        return int(value)
    if isinstance(template, float):
        return float(value)
    if isinstance(template, Path):
        return Path(str(value))
    if isinstance(template, tuple):
        if isinstance(value, str):
            value = [v for v in value.split(",")]
        return tuple(str(v).strip() for v in (value or []) if str(v).strip())
    return value


def _apply_section(obj: Any, d: Any, *, base_dir: Optional[Path]) -> Any:
    if not isinstance(d, dict) or not d:
        return obj
    known = {f.name for f in fields(obj)}
    kwargs: Dict[str, Any] = {}
    for k, v in d.items():
        if k not in known or v is None:
            continue
        cur = getattr(obj, k)
        nv = _coerce_like(cur, v)
        # Relative paths in a config file are relative to that file
        if isinstance(nv, Path) and base_dir is not None and not nv.is_absolute():
            nv = (base_dir / nv).resolve()
        kwargs[k] = nv
    return replace(obj, **kwargs)


def app_config_from_dict(cfg: Dict[str, Any], *, base_dir: Optional[Path] = None) -> AppConfig:
    base = default_config()
    out = AppConfig(
        server=_apply_section(base.server, deep_get(cfg, "server", {}), base_dir=base_dir),
        inputs=_apply_section(base.inputs, deep_get(cfg, "inputs", {}), base_dir=base_dir),
        render=_apply_section(base.render, deep_get(cfg, "render", {}), base_dir=base_dir),
        logging=_apply_section(base.logging, deep_get(cfg, "logging", {}), base_dir=base_dir),
    )
    out.render.validate()
    return out


def load_app_config(path: Optional[Path]) -> AppConfig:
    """
    Build the application config from a YAML file; built-in defaults when path is None.
    """
    if path is None or not str(path).strip():
        cfg = default_config()
        cfg.render.validate()
        return cfg
    p = resolve_config_path(Path(path))
    return app_config_from_dict(load_yaml(p), base_dir=p.parent if p.exists() else None)
