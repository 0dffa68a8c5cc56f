"""Byte-size helpers for compressed image buffers."""

from __future__ import annotations

import math

_KB = 1024
_MB = 1024 * 1024
_MB_DECIMALS = 10_000


def size_in_kb(data: bytes | bytearray | memoryview) -> int:
    return len(data) // _KB


def size_in_mb(data: bytes | bytearray | memoryview) -> float:
    """Size in megabytes, rounded up to 4 decimal places."""
    return math.ceil((len(data) / _MB) * _MB_DECIMALS) / _MB_DECIMALS
