from __future__ import annotations

from pathlib import Path

import pytest

SMALL_LAS = "\n".join(
    [
        "~VERSION INFORMATION",
        " VERS.   2.0 : CWLS LOG ASCII STANDARD - VERSION 2.0",
        " WRAP.    NO : ONE LINE PER DEPTH STEP",
        "~WELL INFORMATION",
        " STRT.M   1000.0 : START DEPTH",
        " STOP.M   1004.5 : STOP DEPTH",
        " STEP.M      0.5 : STEP",
        " NULL.   -999.25 : NULL VALUE",
        " WELL.   TEST 1-1 : WELL",
        "~CURVE INFORMATION",
        " DEPT.M      : Depth",
        " GR  .GAPI   : Gamma ray",
        " RHOB.G/CC   : Bulk density",
        "~A",
        " 1000.0   50.0   2.50",
        " 1000.5   55.0   2.55",
        " 1001.0   60.0   2.60",
        " 1001.5 -999.25  2.58",
        " 1002.0   70.0   2.52",
        " 1002.5   65.0 -999.25",
        " 1003.0   58.0   2.49",
        " 1003.5   52.0   2.47",
        " 1004.0   47.0   2.45",
        " 1004.5   44.0   2.44",
        "",
    ]
)


@pytest.fixture()
def small_las_text() -> str:
    return SMALL_LAS


@pytest.fixture()
def samples_dir(tmp_path: Path) -> Path:
    d = tmp_path / "samples"
    d.mkdir()
    (d / "small.las").write_text(SMALL_LAS, encoding="utf-8")
    return d
