# src/lasplot/io/csv.py
from __future__ import annotations

import csv
import io
import re
from typing import List, Tuple

try:
    import pandas as pd  # type: ignore
except Exception as e:  # pragma: no cover
    raise RuntimeError("pandas is required. pip install pandas") from e

from lasplot.errors import DatasetLoadError
from lasplot.io.dataset import DEFAULT_NULL_VALUE, CurveInfo, LogDataset, build_dataset


def _first_nonempty_line(sample: str) -> str:
    for line in sample.splitlines():
        s = line.strip()
        if s and not s.startswith("#"):
            return s
    return ""


def _detect_delimiter(sample: str) -> str:
    """
    Delimiter detection for depth-indexed CSV/TSV exports.

    Strategy:
      1) Fast-path based on first non-empty line when unambiguous.
      2) Heuristic scoring across multiple lines (prefers consistent column counts).
      3) Fallback to csv.Sniffer with constrained delimiters.
    """
    first = _first_nonempty_line(sample)

    cands = [",", "\t", ";", "|"]

    has = {d: (d in first) for d in cands}
    if has["\t"] and not (has[","] or has[";"] or has["|"]):
        return "\t"
    if has[","] and not (has["\t"] or has[";"] or has["|"]):
        return ","

    lines = [ln for ln in sample.splitlines() if ln.strip() and not ln.lstrip().startswith("#")]
    lines = lines[:50]

    def _score(delim: str) -> float:
        counts = [ln.count(delim) for ln in lines]
        if not counts:
            return 0.0
        mx = max(counts)
        if mx == 0:
            return 0.0
        mean = sum(counts) / len(counts)
        var = sum((c - mean) ** 2 for c in counts) / max(1, len(counts) - 1)
        return float(mean) / (1.0 + float(var))

    scores = {d: _score(d) for d in cands}
    best = max(cands, key=lambda d: scores[d])
    if scores.get(best, 0.0) > 0.0:
        return best

    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=cands)
        return dialect.delimiter
    except Exception:
        return ","


_UNIT_PAREN_RE = re.compile(r"^\s*([^()\[\]]+?)\s*[\(\[]\s*([^()\[\]]*)\s*[\)\]]\s*$")


def split_header(col: str) -> Tuple[str, str]:
    """
    'GR.API' / 'GR (API)' / 'GR [API]' -> ('GR', 'API'); plain 'GR' -> ('GR', '').
    """
    s = str(col or "").strip()
    m = _UNIT_PAREN_RE.match(s)
    if m:
        return m.group(1).strip(), m.group(2).strip()
    if "." in s:
        mn, unit = s.split(".", 1)
        if mn.strip():
            return mn.strip(), unit.strip()
    return s, ""


def parse_csv_dataset(
    text: str,
    *,
    name: str = "",
    null_value: float = DEFAULT_NULL_VALUE,
) -> LogDataset:
    """
    Depth-indexed table: first row holds curve headers, first column is usually depth.
    Non-numeric cells become NaN (no measurement).
    """
    sample = text[:32_000]
    delimiter = _detect_delimiter(sample)
    try:
        df = pd.read_csv(io.StringIO(text), sep=delimiter, comment="#", skipinitialspace=True)
    except Exception as e:
        raise DatasetLoadError(f"Failed to parse CSV: {e}") from e

    if df.shape[1] == 0:
        raise DatasetLoadError("CSV has no columns")

    curves: List[CurveInfo] = []
    for c in df.columns:
        mn, unit = split_header(str(c))
        curves.append(CurveInfo(mnemonic=mn, unit=unit))

    values = df.apply(pd.to_numeric, errors="coerce").to_numpy(dtype="float64")
    return build_dataset(curves, values, null_value=null_value, name=name)
