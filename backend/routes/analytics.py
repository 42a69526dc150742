"""
Analytics routes — school analytics API endpoints.

Every endpoint resolves its query parameters into a scope, runs one
computation against the record store and returns the JSON envelope.
"""

import os
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core import analytics
from core.envelope import Envelope
from core.scope import (
    resolve_attendance_scope,
    resolve_class_average_scope,
    resolve_grade_scope,
    resolve_school_scope,
    resolve_student_vs_class_scope,
    resolve_teacher_scope,
)
from core.store import RecordStore, get_store

router = APIRouter()

CLASS_AVERAGE_INCLUDES_SELF = os.getenv(
    "CLASS_AVERAGE_INCLUDES_SELF", "true"
).strip().lower() in {"1", "true", "yes", "on"}


def _respond(envelope: Envelope) -> JSONResponse:
    return JSONResponse(envelope.to_dict(), status_code=envelope.status_code)


@router.get("/attendance")
async def attendance(
    classId: Optional[str] = None,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    period: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    """Per-date attendance percentage for a class over a date range."""
    scope = resolve_attendance_scope(classId, startDate, endDate, period)
    return _respond(analytics.attendance_analytics(store, scope))


@router.get("/grades")
async def grades(
    classId: Optional[str] = None,
    examType: Optional[str] = None,
    subject: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    """Average, median, highest and lowest grade for a class and exam."""
    scope = resolve_grade_scope(classId, examType, subject)
    return _respond(analytics.grade_analytics(store, scope))


@router.get("/teacher-performance")
async def teacher_performance(
    teacherId: Optional[str] = None,
    period: Optional[str] = None,
    startDate: Optional[str] = None,
    endDate: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    """Attendance per class taught and grades given, over month/quarter/year."""
    scope = resolve_teacher_scope(teacherId, period, startDate, endDate)
    return _respond(analytics.teacher_performance(store, scope))


@router.get("/school-performance")
async def school_performance(
    schoolId: Optional[str] = None,
    year: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    """School-wide attendance trend, exam averages and fee collections."""
    scope = resolve_school_scope(schoolId, year)
    return _respond(analytics.school_performance(store, scope))


@router.get("/class-averages")
async def class_averages(
    classId: Optional[str] = None,
    subject: Optional[str] = None,
    examType: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    scope = resolve_class_average_scope(classId, subject, examType)
    return _respond(analytics.class_averages(store, scope))


@router.get("/student-vs-class")
async def student_vs_class(
    studentId: Optional[str] = None,
    subject: Optional[str] = None,
    examType: Optional[str] = None,
    store: RecordStore = Depends(get_store),
):
    """A student's score next to the class average for the same subject/exam."""
    scope = resolve_student_vs_class_scope(studentId, subject, examType)
    return _respond(
        analytics.student_vs_class(store, scope, include_self=CLASS_AVERAGE_INCLUDES_SELF)
    )
