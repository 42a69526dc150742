"""
pipeline.py — In-memory aggregation pipeline (flatten → group → reduce).

Attendance and grade documents embed one entry per student. Filters live on
the parent document, group keys live on the entries, so documents are first
fanned out into one row per entry and then grouped with pandas.

Every function is pure and works on already-fetched records. An empty input
produces an empty result, never an error.
"""

from typing import Any, Dict, Iterable, List, Mapping, Sequence

import pandas as pd

from core import stats

PRESENT = "present"


# ── Fan-out ─────────────────────────────────────────────────────────

def flatten_entries(
    records: Iterable[Mapping[str, Any]],
    parent_fields: Sequence[str],
    entry_fields: Sequence[str],
) -> pd.DataFrame:
    """One row per embedded entry, with the parent's fields copied on."""
    columns = list(parent_fields) + [f for f in entry_fields if f not in parent_fields]
    rows = []
    for record in records:
        parent = {f: record.get(f) for f in parent_fields}
        for entry in record.get("entries") or []:
            row = dict(parent)
            for f in entry_fields:
                row[f] = entry.get(f)
            rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def with_month_keys(frame: pd.DataFrame, date_field: str = "date") -> pd.DataFrame:
    """Add integer ``year`` and ``month`` columns derived from ``date_field``."""
    frame = frame.copy()
    dates = pd.to_datetime(frame[date_field], errors="coerce")
    frame = frame[dates.notna()].copy()
    dates = dates[dates.notna()]
    frame["year"] = dates.dt.year.astype(int)
    frame["month"] = dates.dt.month.astype(int)
    return frame


# ── Reductions ──────────────────────────────────────────────────────

def summarize(values: Iterable) -> Dict[str, Any]:
    """count/sum/mean/min/max/median of one sequence; {} when it is empty."""
    values = list(values)
    n = stats.count(values)
    if n == 0:
        return {}
    return {
        "count": n,
        "sum": stats.total(values),
        "mean": stats.mean(values),
        "min": stats.minimum(values),
        "max": stats.maximum(values),
        "median": stats.median(values),
    }


def _key_dict(by: Sequence[str], key: Any) -> Dict[str, Any]:
    if not isinstance(key, tuple):
        key = (key,)
    return dict(zip(by, key))


def grouped_summary(frame: pd.DataFrame, by: Sequence[str], value: str) -> List[Dict[str, Any]]:
    """Per-group summary, ordered ascending by group key. Empty groups are skipped."""
    by = list(by)
    results = []
    if frame.empty:
        return results
    for key, group in frame.groupby(by, sort=True):
        summary = summarize(group[value].tolist())
        if not summary:
            continue
        results.append({**_key_dict(by, key), **summary})
    return results


def attendance_rates(frame: pd.DataFrame, by: Sequence[str]) -> pd.DataFrame:
    """
    Present/total counts and the unrounded attendance percentage per group.

    Only status exactly "present" counts; late, excused and absent do not.
    """
    by = list(by)
    columns = by + ["totalEntries", "presentCount", "attendancePct"]
    if frame.empty:
        return pd.DataFrame(columns=columns)

    flagged = frame.assign(_present=(frame["status"] == PRESENT).astype(int))
    grouped = (
        flagged.groupby(by, sort=True)
        .agg(totalEntries=("_present", "size"), presentCount=("_present", "sum"))
        .reset_index()
    )
    grouped["attendancePct"] = [
        stats.percentage(p, t)
        for p, t in zip(grouped["presentCount"], grouped["totalEntries"])
    ]
    return grouped[columns]
