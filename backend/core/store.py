"""
store.py — Read-only record store adapter.

The analytics engine only ever calls ``find(collection, filter)``. The
in-memory implementation here serves documents loaded from a JSON file
(``{"attendance": [...], "grades": [...], ...}``) and is what the service
and the tests run against.

Filter values:
  scalar            → equality
  list/tuple/set    → membership
  DateRange         → inclusive range on a date field
"""

import copy
import json
import logging
import os
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

import pandas as pd

from core.errors import StoreUnavailable
from core.scope import DateRange

logger = logging.getLogger(__name__)

COLLECTIONS = ("attendance", "grades", "teachers", "classes", "students", "payments")

DATE_FIELDS = {
    "attendance": ("date",),
    "grades": ("gradedAt",),
    "payments": ("paymentDate",),
}

DEFAULT_RECORDS_PATH = Path(__file__).resolve().parent.parent / "data" / "records.json"
RECORDS_PATH = os.getenv("RECORDS_PATH", str(DEFAULT_RECORDS_PATH))


class RecordStore(Protocol):
    def find(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        ...


# ── Normalisation ───────────────────────────────────────────────────

def _to_datetime(value: Any) -> Optional[datetime]:
    """Naive UTC datetime, or None when the value is not a readable date."""
    if value is None or (isinstance(value, datetime) and value.tzinfo is None):
        return value
    ts = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(ts):
        logger.warning("Unreadable date %r treated as missing", value)
        return None
    return ts.tz_localize(None).to_pydatetime()


def _normalise(collection: str, doc: Dict[str, Any]) -> Dict[str, Any]:
    doc = dict(doc)
    if "_id" in doc and "id" not in doc:
        doc["id"] = doc.pop("_id")
    for field in DATE_FIELDS.get(collection, ()):
        if field in doc:
            doc[field] = _to_datetime(doc[field])
    return doc


def _matches(doc: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    for field, expected in filter.items():
        actual = doc.get(field)
        if isinstance(expected, DateRange):
            if actual is None or not expected.contains(actual):
                return False
        elif isinstance(expected, (list, tuple, set, frozenset)):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


# ── In-memory store ─────────────────────────────────────────────────

class InMemoryRecordStore:
    """
    Holds documents per collection. Either pass ``collections`` directly or a
    ``path`` to a JSON file, which is read on first use.
    """

    def __init__(
        self,
        collections: Optional[Mapping[str, List[Dict[str, Any]]]] = None,
        path: Optional[str] = None,
    ):
        self.path = path
        self._data: Optional[Dict[str, List[Dict[str, Any]]]] = None
        if collections is not None:
            self._data = self._build(collections)

    def _build(self, raw: Mapping[str, Any]) -> Dict[str, List[Dict[str, Any]]]:
        data: Dict[str, List[Dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        for name, docs in raw.items():
            if name not in data:
                logger.warning("Ignoring unknown collection '%s'", name)
                continue
            data[name] = [_normalise(name, d) for d in docs or []]
        return data

    def _load(self) -> Dict[str, List[Dict[str, Any]]]:
        if self._data is not None:
            return self._data
        if not self.path:
            self._data = self._build({})
            return self._data
        try:
            with open(self.path, encoding="utf-8") as f:
                raw = json.load(f)
            self._data = self._build(raw)
        except (OSError, ValueError, TypeError, AttributeError) as exc:
            logger.error("Could not load records from %s: %s", self.path, exc)
            raise StoreUnavailable() from exc
        logger.info(
            "Loaded records from %s (%s)",
            self.path,
            ", ".join(f"{k}={len(v)}" for k, v in self._data.items()),
        )
        return self._data

    def find(self, collection: str, filter: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        data = self._load()
        if collection not in data:
            logger.error("Unknown collection requested: %s", collection)
            raise StoreUnavailable()
        filter = filter or {}
        found = [copy.deepcopy(d) for d in data[collection] if _matches(d, filter)]
        logger.debug("find(%s, %s) -> %d documents", collection, filter, len(found))
        return found


@lru_cache(maxsize=1)
def get_store() -> InMemoryRecordStore:
    """Process-wide store built from RECORDS_PATH."""
    return InMemoryRecordStore(path=RECORDS_PATH)
