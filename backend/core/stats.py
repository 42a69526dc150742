"""
stats.py — Pure statistical functions shared by every aggregation.

Computes:
- mean and median (None when there is nothing to average)
- percentage with a zero-denominator guard
- half-away-from-zero rounding for display values

Missing values (None / NaN) are dropped before computing, so "no data"
surfaces as None instead of being coerced to zero.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional

import numpy as np


# ── Helpers ─────────────────────────────────────────────────────────

def _clean(values: Iterable) -> List[float]:
    """Coerce to floats, skipping None/NaN/inf."""
    cleaned = []
    for v in values:
        if v is None:
            continue
        try:
            f = float(v)
        except (TypeError, ValueError):
            continue
        if np.isnan(f) or np.isinf(f):
            continue
        cleaned.append(f)
    return cleaned


# ── Central tendency ────────────────────────────────────────────────

def mean(values: Iterable) -> Optional[float]:
    vals = _clean(values)
    if not vals:
        return None
    return float(np.mean(vals))


def median(values: Iterable) -> Optional[float]:
    """Middle value for odd counts, mean of the two middles for even counts."""
    vals = _clean(values)
    if not vals:
        return None
    return float(np.median(vals))


def total(values: Iterable) -> float:
    """Sum of the present values; 0.0 for an empty sequence."""
    return float(sum(_clean(values)))


def minimum(values: Iterable) -> Optional[float]:
    vals = _clean(values)
    return min(vals) if vals else None


def maximum(values: Iterable) -> Optional[float]:
    vals = _clean(values)
    return max(vals) if vals else None


def count(values: Iterable) -> int:
    return len(_clean(values))


# ── Ratios and rounding ─────────────────────────────────────────────

def percentage(numerator, denominator) -> float:
    if not denominator:
        return 0.0
    return float(numerator) / float(denominator) * 100


def round_half_away(value, precision: int = 2):
    """
    Round half away from zero at ``precision`` decimals.

    Works on the shortest decimal representation of the float, so 2.675
    rounds to 2.68 rather than numpy's 2.67. Precision 0 returns an int.
    """
    if value is None:
        return None
    f = float(value)
    if np.isnan(f) or np.isinf(f):
        return None
    quantum = Decimal(1).scaleb(-precision)
    rounded = Decimal(repr(f)).quantize(quantum, rounding=ROUND_HALF_UP)
    if precision <= 0:
        return int(rounded)
    return float(rounded)
