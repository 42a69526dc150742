"""
Tests for core/store.py — filter semantics and JSON loading.
"""

import json
import os
import sys
from datetime import datetime

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.errors import StoreUnavailable
from core.scope import DateRange
from core.store import InMemoryRecordStore

from conftest import CLASS_A, CLASS_B, S1, SCHOOL


class TestFind:
    def test_equality(self, store):
        found = store.find("students", {"classId": CLASS_B})
        assert [s["classId"] for s in found] == [CLASS_B]

    def test_membership(self, store):
        found = store.find("attendance", {"classId": [CLASS_A, CLASS_B]})
        assert len(found) == 4

    def test_date_range_is_inclusive(self, store):
        rng = DateRange(datetime(2024, 1, 15), datetime(2024, 1, 16))
        found = store.find("attendance", {"classId": CLASS_A, "date": rng})
        assert len(found) == 2

    def test_dates_are_normalised(self, store):
        payment = store.find("payments", {"studentId": S1, "feeStructureId": "f1"})[0]
        assert payment["paymentDate"] == datetime(2024, 1, 5)

    def test_no_filter_returns_everything(self, store):
        assert len(store.find("classes")) == 3

    def test_returns_copies(self, store):
        first = store.find("teachers")[0]
        first["classes"].clear()
        assert store.find("teachers")[0]["classes"]

    def test_unknown_collection(self, store):
        with pytest.raises(StoreUnavailable):
            store.find("lessons", {})

    def test_mongo_style_id_is_accepted(self):
        store = InMemoryRecordStore({"classes": [{"_id": CLASS_A, "schoolId": SCHOOL}]})
        assert store.find("classes", {"id": CLASS_A})


class TestLoadFromFile:
    def test_loads_json(self, tmp_path, records):
        path = tmp_path / "records.json"
        path.write_text(json.dumps(records), encoding="utf-8")
        store = InMemoryRecordStore(path=str(path))
        assert len(store.find("students", {"schoolId": SCHOOL})) == 5

    def test_missing_file_is_store_unavailable(self, tmp_path):
        store = InMemoryRecordStore(path=str(tmp_path / "nope.json"))
        with pytest.raises(StoreUnavailable) as exc:
            store.find("grades", {})
        assert exc.value.status_code == 500

    def test_unreadable_date_is_treated_as_missing(self, tmp_path, records):
        records["payments"].append(
            {"studentId": S1, "feeStructureId": "f3", "amountPaid": 40, "paymentDate": "n/a"}
        )
        path = tmp_path / "records.json"
        path.write_text(json.dumps(records), encoding="utf-8")
        store = InMemoryRecordStore(path=str(path))

        assert store.find("payments", {"feeStructureId": "f3"})[0]["paymentDate"] is None
        rng = DateRange(datetime(2000, 1, 1), datetime(2100, 1, 1))
        assert len(store.find("payments", {"paymentDate": rng})) == 5
        assert len(store.find("grades", {"classId": CLASS_A})) == 3

    def test_aware_dates_become_naive_utc(self):
        store = InMemoryRecordStore({"payments": [
            {"studentId": S1, "amountPaid": 1, "paymentDate": "2024-01-05T02:00:00+02:00"},
        ]})
        assert store.find("payments")[0]["paymentDate"] == datetime(2024, 1, 5)

    def test_corrupt_file_is_store_unavailable(self, tmp_path):
        path = tmp_path / "records.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreUnavailable):
            InMemoryRecordStore(path=str(path)).find("grades", {})
