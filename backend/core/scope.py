"""
scope.py — Query scope resolution.

Turns loosely-typed request parameters into one frozen scope object per
analytics endpoint. Resolution is pure: it only validates and normalises,
it never touches the record store.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd

from core.errors import InvalidIdentifier, InvalidParameter, MissingParameter

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)

# Months looked back for each period keyword.
PERIOD_MONTHS = {"month": 1, "quarter": 3, "year": 12}

_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_DATE = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}(:?\d{2})?)?)?$"
)


# ── Scope types ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] window over a date field."""

    start: datetime
    end: datetime
    # False for the implicit epoch-to-now window.
    bounded: bool = True

    def contains(self, value: datetime) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True)
class AttendanceScope:
    class_id: str
    date_range: DateRange


@dataclass(frozen=True)
class GradeScope:
    class_id: str
    exam_type: str
    subject_id: Optional[str] = None


@dataclass(frozen=True)
class TeacherScope:
    teacher_id: str
    date_range: DateRange


@dataclass(frozen=True)
class SchoolScope:
    school_id: Optional[str] = None
    year: Optional[int] = None


@dataclass(frozen=True)
class ClassAverageScope:
    class_id: str
    subject_id: str
    exam_type: str


@dataclass(frozen=True)
class StudentVsClassScope:
    student_id: str
    subject_id: str
    exam_type: str


# ── Field validation ────────────────────────────────────────────────

def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_valid_identifier(value: Any) -> bool:
    return isinstance(value, str) and bool(_ID_PATTERN.match(value.strip()))


def require_identifier(value: Any, field: str) -> str:
    if _blank(value):
        raise MissingParameter(field)
    if not is_valid_identifier(value):
        raise InvalidIdentifier(field)
    return value.strip()


def optional_identifier(value: Any, field: str) -> Optional[str]:
    if _blank(value):
        return None
    return require_identifier(value, field)


def require_text(**fields: Any) -> None:
    """Raise MissingParameter naming every absent field."""
    missing = [name for name, value in fields.items() if _blank(value)]
    if missing:
        raise MissingParameter(*missing)


def utc_now() -> datetime:
    """Current time as a naive UTC datetime, matching stored dates."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_date(value: Any, field: str, end_of_day: bool = False) -> datetime:
    """
    Parse an ISO-8601 date or datetime into a naive UTC datetime.
    A date-only end bound is stretched to cover the whole day.
    """
    text = str(value).strip()
    if not _ISO_DATE.match(text):
        raise InvalidParameter(f"{field} must be an ISO-8601 date.")
    try:
        ts = pd.Timestamp(text)
    except (TypeError, ValueError):
        raise InvalidParameter(f"{field} must be an ISO-8601 date.")
    if pd.isna(ts):
        raise InvalidParameter(f"{field} must be an ISO-8601 date.")
    if ts.tzinfo is not None:
        ts = ts.tz_convert("UTC").tz_localize(None)
    if end_of_day and _DATE_ONLY.match(text):
        ts = ts + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)
    return ts.to_pydatetime()


def resolve_date_range(
    start_date: Any = None,
    end_date: Any = None,
    period: Any = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """
    Explicit dates win over a period keyword; with neither the range runs
    from the epoch to now.
    """
    now = now or utc_now()

    if not _blank(start_date) or not _blank(end_date):
        start = parse_date(start_date, "startDate") if not _blank(start_date) else EPOCH
        end = parse_date(end_date, "endDate", end_of_day=True) if not _blank(end_date) else now
        if start > end:
            raise InvalidParameter("startDate must not be after endDate.")
        return DateRange(start, end)

    if not _blank(period):
        key = str(period).strip().lower()
        if key not in PERIOD_MONTHS:
            raise InvalidParameter(
                f"period must be one of: {', '.join(PERIOD_MONTHS)}."
            )
        start = (pd.Timestamp(now) - pd.DateOffset(months=PERIOD_MONTHS[key])).to_pydatetime()
        return DateRange(start, now)

    return DateRange(EPOCH, now, bounded=False)


def parse_year(value: Any) -> Optional[int]:
    if _blank(value):
        return None
    try:
        year = int(str(value).strip())
    except ValueError:
        raise InvalidParameter("year must be a four-digit number.")
    if not 1900 <= year <= 9999:
        raise InvalidParameter("year must be a four-digit number.")
    return year


# ── Per-endpoint resolvers ──────────────────────────────────────────

def resolve_attendance_scope(
    classId=None, startDate=None, endDate=None, period=None, now=None
) -> AttendanceScope:
    scope = AttendanceScope(
        class_id=require_identifier(classId, "classId"),
        date_range=resolve_date_range(startDate, endDate, period, now=now),
    )
    logger.debug("Resolved attendance scope: %s", scope)
    return scope


def resolve_grade_scope(classId=None, examType=None, subject=None) -> GradeScope:
    class_id = require_identifier(classId, "classId")
    require_text(examType=examType)
    scope = GradeScope(
        class_id=class_id,
        exam_type=examType.strip(),
        subject_id=None if _blank(subject) else subject.strip(),
    )
    logger.debug("Resolved grade scope: %s", scope)
    return scope


def resolve_teacher_scope(
    teacherId=None, period=None, startDate=None, endDate=None, now=None
) -> TeacherScope:
    scope = TeacherScope(
        teacher_id=require_identifier(teacherId, "teacherId"),
        date_range=resolve_date_range(startDate, endDate, period, now=now),
    )
    logger.debug("Resolved teacher scope: %s", scope)
    return scope


def resolve_school_scope(schoolId=None, year=None) -> SchoolScope:
    scope = SchoolScope(
        school_id=optional_identifier(schoolId, "schoolId"),
        year=parse_year(year),
    )
    logger.debug("Resolved school scope: %s", scope)
    return scope


def resolve_class_average_scope(classId=None, subject=None, examType=None) -> ClassAverageScope:
    class_id = require_identifier(classId, "classId")
    require_text(subject=subject, examType=examType)
    return ClassAverageScope(class_id, subject.strip(), examType.strip())


def resolve_student_vs_class_scope(studentId=None, subject=None, examType=None) -> StudentVsClassScope:
    student_id = require_identifier(studentId, "studentId")
    require_text(subject=subject, examType=examType)
    return StudentVsClassScope(student_id, subject.strip(), examType.strip())
