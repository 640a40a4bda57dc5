# src/lasplot/io/__init__.py
from __future__ import annotations

from .dataset import CurveInfo, LogDataset, WellItem, build_dataset
from .las import parse_las_dataset, read_las_text
from .csv import parse_csv_dataset
from .source import fetch_url_text, list_sample_files, load_dataset, load_source_text, parse_dataset, read_local_text

__all__ = [
    "CurveInfo",
    "LogDataset",
    "WellItem",
    "build_dataset",
    "parse_las_dataset",
    "read_las_text",
    "parse_csv_dataset",
    "fetch_url_text",
    "list_sample_files",
    "load_dataset",
    "load_source_text",
    "parse_dataset",
    "read_local_text",
]
