# src/lasplot/io/las.py
from __future__ import annotations

import contextlib
import io
import re
from typing import List, Optional

import numpy as np

try:
    import lasio  # type: ignore
except Exception:  # pragma: no cover
    lasio = None  # type: ignore

from lasplot.errors import DatasetLoadError
from lasplot.io.dataset import DEFAULT_NULL_VALUE, CurveInfo, LogDataset, WellItem, build_dataset


def require_lasio() -> None:
    if lasio is None:
        raise RuntimeError("lasio is not installed. Install with: pip install lasio")


_WRAP_LINE_RE = re.compile(
    r"\bWRAP\b\s*(?:[.:=]|\s)\s*(YES|NO|TRUE|FALSE|0|1|Y|N)\b",
    re.IGNORECASE,
)


def is_wrapped_las_text(text: str) -> Optional[bool]:
    """
    Heuristic: scan the header for a WRAP line (YES/NO) without fully parsing.

    Returns:
      - True if WRAP=YES
      - False if WRAP=NO
      - None if cannot determine
    """
    # Limit to header-ish content: stop at ~A so data blocks never match.
    upper = text.upper()
    cut = upper.find("~A")
    head = text[:cut] if cut > 0 else text

    for line in head.splitlines():
        m = _WRAP_LINE_RE.search(line)
        if not m:
            continue
        val = m.group(1).strip().upper()
        if val in {"YES", "TRUE", "1", "Y"}:
            return True
        if val in {"NO", "FALSE", "0", "N"}:
            return False
        return None
    return None


@contextlib.contextmanager
def quiet_stdio(enabled: bool = True):
    """
    Redirect stdout/stderr to suppress noisy third-party library prints.
    """
    if not enabled:
        yield
        return
    buf_out = io.StringIO()
    buf_err = io.StringIO()
    with contextlib.redirect_stdout(buf_out), contextlib.redirect_stderr(buf_err):
        yield


def read_las_text(text: str, *, quiet: bool = True) -> "lasio.LASFile":
    """
    Parse LAS content with lasio, keeping mnemonics as written in the file.
    Wrapped files are forced onto the 'normal' engine.
    """
    require_lasio()
    kwargs = {"mnemonic_case": "preserve"}
    if is_wrapped_las_text(text) is True:
        kwargs["engine"] = "normal"
    try:
        with quiet_stdio(quiet):
            return lasio.read(io.StringIO(text), **kwargs)  # type: ignore[misc]
    except Exception as e:
        raise DatasetLoadError(f"Failed to parse LAS: {e}") from e


def _section_value(section: object, mnemonic: str) -> Optional[str]:
    try:
        for item in section or []:  # type: ignore[union-attr]
            if str(getattr(item, "mnemonic", "") or "").strip().upper() == mnemonic:
                return str(getattr(item, "value", "") or "").strip()
    except Exception:
        return None
    return None


def _null_value(las: "lasio.LASFile") -> float:
    raw = _section_value(getattr(las, "well", None), "NULL")
    if not raw:
        return DEFAULT_NULL_VALUE
    try:
        return float(raw)
    except ValueError:
        return DEFAULT_NULL_VALUE


def _curve_infos(las: "lasio.LASFile") -> List[CurveInfo]:
    out: List[CurveInfo] = []
    for c in getattr(las, "curves", []) or []:
        mn = str(getattr(c, "mnemonic", "") or "").strip()
        if not mn:
            continue
        out.append(
            CurveInfo(
                mnemonic=mn,
                unit=str(getattr(c, "unit", "") or "").strip(),
                description=str(getattr(c, "descr", "") or "").strip(),
            )
        )
    return out


def _well_items(las: "lasio.LASFile") -> List[WellItem]:
    out: List[WellItem] = []
    for item in getattr(las, "well", []) or []:
        out.append(
            WellItem(
                mnemonic=str(getattr(item, "mnemonic", "") or "").strip(),
                unit=str(getattr(item, "unit", "") or "").strip(),
                value=str(getattr(item, "value", "") or "").strip(),
                description=str(getattr(item, "descr", "") or "").strip(),
            )
        )
    return out


def dataset_from_las(las: "lasio.LASFile", *, name: str = "") -> LogDataset:
    curves = _curve_infos(las)
    data = np.asarray(getattr(las, "data", np.empty((0, len(curves)))), dtype="float64")
    if data.ndim == 2 and data.shape[1] != len(curves):
        raise DatasetLoadError(
            f"LAS data has {data.shape[1]} columns but ~CURVE lists {len(curves)} curves"
        )
    return build_dataset(
        curves,
        data,
        null_value=_null_value(las),
        well_info=_well_items(las),
        version=_section_value(getattr(las, "version", None), "VERS") or "",
        name=name,
    )


def parse_las_dataset(text: str, *, name: str = "", quiet: bool = True) -> LogDataset:
    return dataset_from_las(read_las_text(text, quiet=quiet), name=name)
