"""
analytics.py — The six analytics computations.

Each entry point takes a record store and a resolved scope, fetches the
candidate records, runs them through the pipeline/stats/bucketing/comparative
modules and returns an Envelope. Nothing is cached: every call recomputes
from the store.

Field names in the returned data are stable across calls:
  percentages   → attendancePct / avgAttendancePct     (whole numbers)
  averages      → average / averageMarks / classAverage (2 decimals)
  distributions → median / highest / lowest / count
"""

import logging
from typing import Any, Dict, List

import pandas as pd

from core import stats
from core.bucketing import bucket_monthly
from core.comparative import compare_to_peers
from core.envelope import display_average, display_percentage, enveloped
from core.errors import EntityNotFound
from core.pipeline import (
    attendance_rates,
    flatten_entries,
    grouped_summary,
    summarize,
    with_month_keys,
)
from core.scope import (
    AttendanceScope,
    ClassAverageScope,
    DateRange,
    GradeScope,
    SchoolScope,
    StudentVsClassScope,
    TeacherScope,
)
from core.store import RecordStore

logger = logging.getLogger(__name__)

ATTENDANCE_ENTRY = ["studentId", "status"]
GRADE_ENTRY = ["studentId", "percentage"]


# ── Helpers ─────────────────────────────────────────────────────────

def _attendance_rows(records: List[Dict[str, Any]], parent_fields: List[str]) -> pd.DataFrame:
    """Flatten attendance and collapse timestamps to calendar days."""
    rows = flatten_entries(records, parent_fields, ATTENDANCE_ENTRY)
    if not rows.empty:
        rows["date"] = pd.to_datetime(rows["date"]).dt.normalize()
    return rows


def _grade_rows(records: List[Dict[str, Any]], parent_fields: List[str] = ()) -> pd.DataFrame:
    rows = flatten_entries(records, list(parent_fields), GRADE_ENTRY)
    rows["percentage"] = pd.to_numeric(rows["percentage"], errors="coerce")
    return rows


def _grade_summary(rows: pd.DataFrame) -> Dict[str, Any]:
    """{average, median, highest, lowest, count}, or {} with no grades."""
    summary = summarize(rows["percentage"].tolist())
    if not summary:
        return {}
    return {
        "average": display_average(summary["mean"]),
        "median": display_average(summary["median"]),
        "highest": summary["max"],
        "lowest": summary["min"],
        "count": summary["count"],
    }


def _year_range(year: int) -> DateRange:
    return DateRange(
        pd.Timestamp(year=year, month=1, day=1).to_pydatetime(),
        (pd.Timestamp(year=year + 1, month=1, day=1) - pd.Timedelta(microseconds=1)).to_pydatetime(),
    )


def _find_one(store: RecordStore, collection: str, entity_id: str, entity: str) -> Dict[str, Any]:
    found = store.find(collection, {"id": entity_id})
    if not found:
        raise EntityNotFound(entity)
    return found[0]


# ── Entry points ────────────────────────────────────────────────────

@enveloped
def attendance_analytics(store: RecordStore, scope: AttendanceScope) -> List[Dict[str, Any]]:
    """Per-date attendance percentage for one class, oldest first."""
    records = store.find("attendance", {"classId": scope.class_id, "date": scope.date_range})
    rows = _attendance_rows(records, ["classId", "date"])
    daily = attendance_rates(rows, by=["date"])
    logger.debug("Attendance for class %s: %d records, %d days", scope.class_id, len(records), len(daily))
    return [
        {
            "date": pd.Timestamp(r["date"]).date().isoformat(),
            "presentCount": int(r["presentCount"]),
            "totalStudents": int(r["totalEntries"]),
            "attendancePct": display_percentage(r["attendancePct"]),
        }
        for r in daily.to_dict(orient="records")
    ]


@enveloped
def grade_analytics(store: RecordStore, scope: GradeScope) -> Dict[str, Any]:
    """Distribution of grades for a class and exam type, optionally one subject."""
    query = {"classId": scope.class_id, "examType": scope.exam_type}
    if scope.subject_id:
        query["subjectId"] = scope.subject_id
    return _grade_summary(_grade_rows(store.find("grades", query)))


@enveloped
def teacher_performance(store: RecordStore, scope: TeacherScope) -> Dict[str, Any]:
    """
    Classes taught, mean daily attendance per class, and the grades this
    teacher has given over the scope's window.
    """
    teacher = _find_one(store, "teachers", scope.teacher_id, "Teacher")
    classes = list(teacher.get("classes") or [])

    attendance = store.find("attendance", {"classId": classes, "date": scope.date_range}) if classes else []
    rows = _attendance_rows(attendance, ["classId", "date"])
    daily = attendance_rates(rows, by=["classId", "date"])
    attendance_by_class = []
    if not daily.empty:
        for class_id, group in daily.groupby("classId", sort=True):
            attendance_by_class.append({
                "classId": class_id,
                "avgAttendancePct": display_percentage(stats.mean(group["attendancePct"])),
            })

    grade_filter = {"teacherId": scope.teacher_id}
    if scope.date_range.bounded:
        grade_filter["gradedAt"] = scope.date_range
    grades = _grade_rows(store.find("grades", grade_filter))["percentage"]

    return {
        "classCount": len(classes),
        "attendanceByClass": attendance_by_class,
        "averageGradeGiven": display_average(stats.mean(grades)),
        "totalGradesGiven": stats.count(grades),
    }


@enveloped
def school_performance(store: RecordStore, scope: SchoolScope) -> Dict[str, Any]:
    """
    Monthly attendance trend, grade averages per exam type and monthly fee
    collections. ``year`` narrows fee collections only.
    """
    tenant = {"schoolId": scope.school_id} if scope.school_id else {}

    # Attendance: each student's monthly rate, then the mean across students.
    rows = _attendance_rows(store.find("attendance", tenant), ["schoolId", "date"])
    attendance_monthly = []
    if not rows.empty:
        per_student = attendance_rates(with_month_keys(rows), by=["year", "month", "studentId"])
        attendance_monthly = [
            {"year": b["year"], "month": b["month"], "avgAttendancePct": display_percentage(b["value"])}
            for b in bucket_monthly(per_student, "attendancePct", stats.mean)
        ]

    grade_rows = _grade_rows(store.find("grades", tenant), ["examType"])
    grade_stats = [
        {"examType": g["examType"], "averageMarks": display_average(g["mean"]), "count": g["count"]}
        for g in grouped_summary(grade_rows, ["examType"], "percentage")
    ]

    payment_filter: Dict[str, Any] = {}
    if scope.year is not None:
        payment_filter["paymentDate"] = _year_range(scope.year)
    if scope.school_id:
        students = store.find("students", {"schoolId": scope.school_id})
        payment_filter["studentId"] = [s["id"] for s in students]
    payments = pd.DataFrame(store.find("payments", payment_filter), columns=["paymentDate", "amountPaid"])
    fee_collections = [
        {"year": b["year"], "month": b["month"], "totalCollected": display_average(b["value"])}
        for b in bucket_monthly(payments, "amountPaid", stats.total, date_field="paymentDate")
    ]

    return {
        "attendanceMonthly": attendance_monthly,
        "gradeStats": grade_stats,
        "feeCollections": fee_collections,
    }


@enveloped
def class_averages(store: RecordStore, scope: ClassAverageScope) -> Dict[str, Any]:
    records = store.find("grades", {
        "classId": scope.class_id,
        "subjectId": scope.subject_id,
        "examType": scope.exam_type,
    })
    return _grade_summary(_grade_rows(records))


@enveloped
def student_vs_class(
    store: RecordStore, scope: StudentVsClassScope, include_self: bool = True
) -> Dict[str, Any]:
    """A student's score beside their class average for the same subject and exam."""
    student = _find_one(store, "students", scope.student_id, "Student")
    records = store.find("grades", {
        "classId": student.get("classId"),
        "subjectId": scope.subject_id,
        "examType": scope.exam_type,
    })
    comparison = compare_to_peers(
        _grade_rows(records), scope.student_id, "percentage", include_self=include_self
    )
    return {
        "studentScore": display_average(comparison.entity_value),
        "classAverage": display_average(comparison.peer_average),
        "studentsCounted": comparison.peer_count,
    }
