"""
bucketing.py — Monthly trend buckets.

Rows are grouped into (year, month) buckets and reduced to one value per
bucket. Months with no rows are simply absent from the output: the series
is sparse and sized by actual activity.
"""

from typing import Any, Callable, Dict, Iterable, List

import pandas as pd

from core.pipeline import with_month_keys


def bucket_monthly(
    frame: pd.DataFrame,
    value: str,
    reducer: Callable[[Iterable], Any],
    date_field: str = "date",
) -> List[Dict[str, Any]]:
    """
    Reduce ``value`` per (year, month), sorted ascending.

    If the frame already carries ``year``/``month`` columns (e.g. after a
    per-student pre-aggregation) they are used as-is; otherwise they are
    derived from ``date_field``.
    """
    if frame.empty:
        return []
    if not {"year", "month"}.issubset(frame.columns):
        frame = with_month_keys(frame, date_field)
        if frame.empty:
            return []

    buckets = []
    for (year, month), group in frame.groupby(["year", "month"], sort=True):
        if group.empty:
            continue
        buckets.append({
            "year": int(year),
            "month": int(month),
            "value": reducer(group[value].tolist()),
        })
    return buckets
