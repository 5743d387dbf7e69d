"""
Attendance bookkeeping and performance summaries.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable

from .types import ATTENDANCE_PRESENT, ATTENDANCE_STATUSES, AttendanceRecord, Performance, ScoreEntry


def attendance_percentage(records: Iterable[AttendanceRecord]) -> int:
    """Share of present days, rounded half-up; 0 when nothing was recorded."""

    records = tuple(records)
    if not records:
        return 0
    present = sum(1 for record in records if record.status == ATTENDANCE_PRESENT)
    return int(math.floor(present * 100 / len(records) + 0.5))


def mark_attendance(performance: Performance | None, day: date, status: str) -> Performance:
    """
    Record attendance for ``day``, replacing any earlier record for the same day.

    The aggregate ``attendance`` percentage is recomputed from the records.
    """

    status = (status or "").strip().lower()
    if status not in ATTENDANCE_STATUSES:
        raise ValueError(f"Attendance status must be one of: {', '.join(ATTENDANCE_STATUSES)}.")

    base = performance or Performance()
    records = tuple(record for record in base.attendance_records if record.day != day)
    records += (AttendanceRecord(day=day, status=status),)
    return replace(base, attendance_records=records, attendance=attendance_percentage(records))


def _average_percentage(entries: Iterable[ScoreEntry]) -> float | None:
    values = [entry.percentage for entry in entries if entry.percentage is not None]
    if not values:
        return None
    return round(sum(values) / len(values), 1)


@dataclass(frozen=True)
class PerformanceSummary:
    attendance: int
    average_assignment: float | None
    average_exam: float | None
    assignment_count: int
    exam_count: int
    present_days: int
    absent_days: int

    def to_dict(self) -> dict[str, object]:
        return {
            "attendance": self.attendance,
            "averageAssignment": self.average_assignment,
            "averageExam": self.average_exam,
            "assignmentCount": self.assignment_count,
            "examCount": self.exam_count,
            "presentDays": self.present_days,
            "absentDays": self.absent_days,
        }


def summarize_performance(performance: Performance | None) -> PerformanceSummary:
    performance = performance or Performance()
    present = sum(1 for record in performance.attendance_records if record.status == ATTENDANCE_PRESENT)
    return PerformanceSummary(
        attendance=performance.attendance,
        average_assignment=_average_percentage(performance.assignments),
        average_exam=_average_percentage(performance.exams),
        assignment_count=len(performance.assignments),
        exam_count=len(performance.exams),
        present_days=present,
        absent_days=len(performance.attendance_records) - present,
    )
