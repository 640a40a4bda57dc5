# src/lasplot/io/source.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import httpx

from lasplot.errors import DatasetLoadError
from lasplot.io.csv import parse_csv_dataset
from lasplot.io.dataset import LogDataset
from lasplot.io.las import parse_las_dataset
from lasplot.utils.log import get_logger

logger = get_logger(__name__)

SAMPLE_SUFFIXES = (".las", ".csv")
FETCH_TIMEOUT = httpx.Timeout(30.0, read=120.0)


def is_url(ref: str) -> bool:
    r = (ref or "").strip().lower()
    return r.startswith("http://") or r.startswith("https://")


def source_name(ref: str) -> str:
    """
    Trailing file name of a local ref or URL (query string dropped).
    """
    s = (ref or "").strip().split("?", 1)[0].rstrip("/")
    return s.split("/")[-1]


def resolve_local_path(ref: str, samples_dir: Path) -> Path:
    """
    Map a file parameter to a path inside samples_dir; anything escaping the directory is rejected.
    """
    root = Path(samples_dir).resolve()
    p = (root / (ref or "").strip()).resolve()
    if p != root and root not in p.parents:
        raise DatasetLoadError(f"File outside samples directory: {ref!r}")
    return p


def read_local_text(ref: str, samples_dir: Path) -> str:
    p = resolve_local_path(ref, samples_dir)
    try:
        return p.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise DatasetLoadError(f"Failed to read file: {p} ({e})") from e


async def fetch_url_text(url: str) -> str:
    try:
        async with httpx.AsyncClient(follow_redirects=True, timeout=FETCH_TIMEOUT) as client:
            response = await client.get(url)
            response.raise_for_status()
            return response.text
    except httpx.HTTPError as e:
        raise DatasetLoadError(f"Failed to fetch {url}: {e}") from e


def fetch_url_text_sync(url: str) -> str:
    try:
        with httpx.Client(follow_redirects=True, timeout=FETCH_TIMEOUT) as client:
            response = client.get(url)
            response.raise_for_status()
            return response.text
    except httpx.HTTPError as e:
        raise DatasetLoadError(f"Failed to fetch {url}: {e}") from e


def parse_dataset(text: str, *, name: str) -> LogDataset:
    """
    Dispatch on the source name: *.csv -> pandas, anything else -> lasio.
    """
    if source_name(name).lower().endswith(".csv"):
        ds = parse_csv_dataset(text, name=name)
    else:
        ds = parse_las_dataset(text, name=name)
    logger.info("Parsed %s: %d curves x %d rows", name, len(ds.curves), ds.n_rows)
    return ds


def load_source_text(ref: str, samples_dir: Path) -> str:
    if is_url(ref):
        return fetch_url_text_sync(ref)
    return read_local_text(ref, samples_dir)


def load_dataset(ref: str, samples_dir: Path) -> LogDataset:
    """
    Blocking load (CLI, threadpool).
    """
    text = load_source_text(ref, samples_dir)
    return parse_dataset(text, name=source_name(ref))


def _read_list_file(path: Path) -> List[str]:
    out: List[str] = []
    for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        s = line.strip()
        if s and not s.startswith("#"):
            out.append(s)
    return out


def list_sample_files(samples_dir: Path, laslist_file: Optional[Path] = None) -> List[str]:
    """
    Sorted LAS/CSV file names under samples_dir, then entries of the optional list file
    (names or URLs) not already present.
    """
    files: List[str] = []
    root = Path(samples_dir)
    if root.is_dir():
        for p in root.iterdir():
            if p.is_file() and p.suffix.lower() in SAMPLE_SUFFIXES:
                files.append(p.name)
    files.sort()

    if laslist_file is not None and Path(laslist_file).is_file():
        seen = set(files)
        for entry in _read_list_file(Path(laslist_file)):
            if entry not in seen:
                files.append(entry)
                seen.add(entry)
    return files
