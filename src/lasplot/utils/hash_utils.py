# src/lasplot/utils/hash_utils.py
from __future__ import annotations

import hashlib


def stable_hash64(s: str) -> int:
    """
    Stable 64-bit hash, identical across Python processes and runs.
    (Avoids Python's salted hash().)
    """
    h = hashlib.md5((s or "").encode("utf-8")).hexdigest()[:16]
    return int(h, 16) & 0xFFFFFFFFFFFFFFFF
