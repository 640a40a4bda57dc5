# src/lasplot/io/dataset.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import numpy as np

DEFAULT_NULL_VALUE = -999.25


@dataclass(frozen=True)
class CurveInfo:
    mnemonic: str
    unit: str = ""
    description: str = ""


@dataclass(frozen=True)
class WellItem:
    mnemonic: str
    unit: str = ""
    value: str = ""
    description: str = ""


@dataclass(frozen=True)
class LogDataset:
    """
    Parsed well-log table: one column per curve (in ~CURVE order), one row per depth sample.

    Treated as read-only once built; every request derives its own series from it.
    """

    curves: Tuple[CurveInfo, ...]
    data: np.ndarray
    null_value: float = DEFAULT_NULL_VALUE
    well_info: Tuple[WellItem, ...] = field(default_factory=tuple)
    version: str = ""
    name: str = ""

    def __post_init__(self) -> None:
        arr = np.asarray(self.data, dtype="float64")
        n_curves = len(self.curves)
        if arr.size == 0:
            arr = np.empty((0, n_curves), dtype="float64")
        elif arr.ndim == 1:
            # single-curve file, or a single row of a multi-curve file
            arr = arr.reshape(-1, 1) if n_curves == 1 else arr.reshape(1, -1)
        if arr.ndim != 2 or arr.shape[1] != n_curves:
            raise ValueError(
                f"data shape {arr.shape} does not match {n_curves} curves"
            )
        arr.setflags(write=False)
        object.__setattr__(self, "data", arr)

    @property
    def n_rows(self) -> int:
        return int(self.data.shape[0])

    @property
    def mnemonics(self) -> list[str]:
        return [c.mnemonic for c in self.curves]

    def curve_index(self, mnemonic: str) -> Optional[int]:
        """
        Case-insensitive exact match on mnemonic; first match wins.
        """
        target = (mnemonic or "").strip().upper()
        if not target:
            return None
        for i, c in enumerate(self.curves):
            if c.mnemonic.strip().upper() == target:
                return i
        return None

    def series(self, idx: int) -> np.ndarray:
        """
        Curve values with the null sentinel (and NaN) mapped to NaN.
        Returns a fresh array; the dataset itself is never modified.
        """
        col = np.array(self.data[:, int(idx)], dtype="float64", copy=True)
        col[np.isclose(col, float(self.null_value), rtol=0.0, atol=1e-9)] = np.nan
        return col


def build_dataset(
    curves: Sequence[CurveInfo],
    rows: object,
    *,
    null_value: float = DEFAULT_NULL_VALUE,
    well_info: Sequence[WellItem] = (),
    version: str = "",
    name: str = "",
) -> LogDataset:
    return LogDataset(
        curves=tuple(curves),
        data=np.asarray(rows, dtype="float64"),
        null_value=float(null_value),
        well_info=tuple(well_info),
        version=str(version or ""),
        name=str(name or ""),
    )
