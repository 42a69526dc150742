"""Shared fixtures: a small school held in an in-memory record store."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.store import InMemoryRecordStore

SCHOOL = "5f00000000000000000000a1"
OTHER_SCHOOL = "5f00000000000000000000a2"
CLASS_A = "5f00000000000000000000c1"
CLASS_B = "5f00000000000000000000c2"
EMPTY_CLASS = "5f00000000000000000000c3"
TEACHER = "5f00000000000000000000d1"
IDLE_TEACHER = "5f00000000000000000000d2"
S1 = "5f00000000000000000000b1"
S2 = "5f00000000000000000000b2"
S3 = "5f00000000000000000000b3"
S4 = "5f00000000000000000000b4"
NEWCOMER = "5f00000000000000000000b5"
OUTSIDER = "5f00000000000000000000b9"
UNKNOWN = "5f00000000000000000000ff"


def school_records():
    """Raw documents, dates as ISO strings as they would arrive from JSON."""
    return {
        "classes": [
            {"id": CLASS_A, "schoolId": SCHOOL},
            {"id": CLASS_B, "schoolId": SCHOOL},
            {"id": EMPTY_CLASS, "schoolId": SCHOOL},
        ],
        "students": [
            {"id": S1, "classId": CLASS_A, "schoolId": SCHOOL},
            {"id": S2, "classId": CLASS_A, "schoolId": SCHOOL},
            {"id": S3, "classId": CLASS_A, "schoolId": SCHOOL},
            {"id": NEWCOMER, "classId": CLASS_A, "schoolId": SCHOOL},
            {"id": S4, "classId": CLASS_B, "schoolId": SCHOOL},
            {"id": OUTSIDER, "classId": "5f00000000000000000000c9", "schoolId": OTHER_SCHOOL},
        ],
        "teachers": [
            {"id": TEACHER, "classes": [CLASS_A, CLASS_B]},
            {"id": IDLE_TEACHER, "classes": []},
        ],
        "attendance": [
            {"schoolId": SCHOOL, "classId": CLASS_A, "date": "2024-01-15", "entries": [
                {"studentId": S1, "status": "present"},
                {"studentId": S2, "status": "absent"},
                {"studentId": S3, "status": "present"},
            ]},
            {"schoolId": SCHOOL, "classId": CLASS_A, "date": "2024-01-16", "entries": [
                {"studentId": S1, "status": "present"},
                {"studentId": S2, "status": "late"},
                {"studentId": S3, "status": "excused"},
            ]},
            {"schoolId": SCHOOL, "classId": CLASS_A, "date": "2024-03-04", "entries": [
                {"studentId": S1, "status": "present"},
                {"studentId": S2, "status": "present"},
                {"studentId": S3, "status": "present"},
            ]},
            {"schoolId": SCHOOL, "classId": CLASS_B, "date": "2024-01-15", "entries": [
                {"studentId": S4, "status": "absent"},
            ]},
            {"schoolId": OTHER_SCHOOL, "classId": "5f00000000000000000000c9", "date": "2024-02-01", "entries": [
                {"studentId": OUTSIDER, "status": "present"},
            ]},
        ],
        "grades": [
            {"schoolId": SCHOOL, "classId": CLASS_A, "subjectId": "math", "teacherId": TEACHER,
             "examType": "final", "gradedAt": "2024-03-10", "entries": [
                {"studentId": S1, "percentage": 60},
                {"studentId": S2, "percentage": 70},
                {"studentId": S3, "percentage": 80},
                {"studentId": NEWCOMER, "percentage": 90},
            ]},
            {"schoolId": SCHOOL, "classId": CLASS_A, "subjectId": "science", "teacherId": TEACHER,
             "examType": "final", "gradedAt": "2023-06-01", "entries": [
                {"studentId": S1, "percentage": 60},
                {"studentId": S2, "percentage": 70},
                {"studentId": S3, "percentage": 90},
            ]},
            {"schoolId": SCHOOL, "classId": CLASS_A, "subjectId": "history", "teacherId": TEACHER,
             "examType": "midterm", "gradedAt": "2024-02-20", "entries": [
                {"studentId": S1, "percentage": 50},
                {"studentId": S2, "percentage": 60},
                {"studentId": S3, "percentage": 70},
            ]},
            {"schoolId": SCHOOL, "classId": CLASS_B, "subjectId": "math", "teacherId": "5f00000000000000000000d9",
             "examType": "final", "gradedAt": "2024-03-11", "entries": [
                {"studentId": S4, "percentage": 73.5},
            ]},
            {"schoolId": OTHER_SCHOOL, "classId": "5f00000000000000000000c9", "subjectId": "math",
             "teacherId": "5f00000000000000000000d8", "examType": "final", "gradedAt": "2024-03-12",
             "entries": [
                {"studentId": OUTSIDER, "percentage": 10},
            ]},
        ],
        "payments": [
            {"studentId": S1, "feeStructureId": "f1", "amountPaid": 100, "paymentDate": "2024-01-05"},
            {"studentId": S2, "feeStructureId": "f1", "amountPaid": 250.25, "paymentDate": "2024-01-20"},
            {"studentId": S3, "feeStructureId": "f1", "amountPaid": 300, "paymentDate": "2024-03-02"},
            {"studentId": S1, "feeStructureId": "f2", "amountPaid": 80, "paymentDate": "2023-12-30"},
            {"studentId": OUTSIDER, "feeStructureId": "f9", "amountPaid": 999, "paymentDate": "2024-01-10"},
        ],
    }


@pytest.fixture
def records():
    return school_records()


@pytest.fixture
def store(records):
    return InMemoryRecordStore(records)


@pytest.fixture
def empty_store():
    return InMemoryRecordStore({})
