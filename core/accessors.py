from __future__ import annotations

import math
from typing import Any

__all__ = [
    "as_float",
    "as_int",
    "as_non_negative",
    "clamp",
    "get_field",
]


# ==========================================================
# Safe coercion
# ==========================================================
def as_float(x: Any, default: float = 0.0) -> float:
    """Non-numeric, blank, NaN and infinite values fall back to `default`."""
    if x is None or isinstance(x, bool):
        return float(default)
    if isinstance(x, str):
        x = x.strip()
        if not x:
            return float(default)
    try:
        v = float(x)
    except (TypeError, ValueError):
        return float(default)
    if not math.isfinite(v):
        return float(default)
    return v


def as_int(x: Any, default: int = 0) -> int:
    v = as_float(x, float("nan"))
    if math.isnan(v):
        return int(default)
    return int(v)


def as_non_negative(x: Any) -> float:
    return max(0.0, as_float(x, 0.0))


def clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, float(x)))


def get_field(x: Any, key: str, default: Any = None) -> Any:
    if isinstance(x, dict):
        return x.get(key, default)
    return getattr(x, key, default)

