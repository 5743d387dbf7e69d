"""
Typed student record structures.

Records are immutable: every mutation produces a new instance through
``dataclasses.replace`` so snapshots handed to callers can never drift from
the store. Wire names (JSON bodies, CSV headers) are camelCase; attributes
are snake_case.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Mapping, Sequence
from urllib.parse import quote

GRADES: tuple[str, ...] = ("A+", "A", "A-", "B+", "B", "B-", "C+", "C", "C-", "D+", "D", "D-", "F")
GRADE_PLACEHOLDER = "N/A"

NOTE_CATEGORIES: tuple[str, ...] = ("academic", "behavior", "attendance", "achievement", "general")
DEFAULT_NOTE_CATEGORY = "general"

ATTENDANCE_PRESENT = "present"
ATTENDANCE_ABSENT = "absent"
ATTENDANCE_STATUSES: tuple[str, ...] = (ATTENDANCE_PRESENT, ATTENDANCE_ABSENT)

DEFAULT_AVATAR_TEMPLATE = "https://ui-avatars.com/api/?name={name}&background=random"

# Wire name -> attribute name for the fields an update may touch.
MERGEABLE_FIELDS: tuple[tuple[str, str], ...] = (
    ("name", "name"),
    ("email", "email"),
    ("course", "course"),
    ("grade", "grade"),
    ("enrollmentDate", "enrollment_date"),
    ("avatar", "avatar"),
)


def placeholder_avatar(name: str, template: str = DEFAULT_AVATAR_TEMPLATE) -> str:
    """Build the generated avatar URI for a student name."""

    return template.format(name=quote(name or "", safe="!~*'()"))


def normalize_grade(value: object | None) -> str | None:
    """Return the canonical spelling of a grade, or ``None`` when unknown."""

    if not isinstance(value, str):
        return None
    token = value.strip().upper()
    if token == GRADE_PLACEHOLDER:
        return GRADE_PLACEHOLDER
    return token if token in GRADES else None


def parse_iso_date(value: object | None) -> date | None:
    """
    Parse a ``YYYY-MM-DD`` date, or the date part of an ISO timestamp with a
    ``T`` separator.

    Returns ``None`` for blanks and unparseable values, including a valid
    date followed by trailing text.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    token = value.strip()
    if not token:
        return None
    if len(token) > 10:
        if token[10] != "T":
            return None
        parsed = parse_timestamp(token)
        return parsed.date() if parsed is not None else None
    try:
        return date.fromisoformat(token)
    except ValueError:
        return None


def parse_timestamp(value: object | None) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    token = value.strip()
    if token.endswith("Z"):
        token = token[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(token)
    except ValueError:
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _pick(data: Mapping[str, Any], wire_key: str, attr_key: str | None = None) -> Any:
    if wire_key in data:
        return data[wire_key]
    if attr_key is not None and attr_key in data:
        return data[attr_key]
    return None


def _require_mapping(data: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{label} must be an object")
    return data


def _entries(value: Any, label: str) -> Sequence[Any]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValueError(f"{label} must be a list")
    return value


def _clean_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _number(value: Any, default: float = 0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


@dataclass(frozen=True)
class ScoreEntry:
    """A graded item (assignment or exam)."""

    name: str
    score: float
    max_score: float

    @property
    def percentage(self) -> float | None:
        if not self.max_score:
            return None
        return self.score / self.max_score * 100

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "score": self.score, "maxScore": self.max_score}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ScoreEntry":
        data = _require_mapping(data, "Score entry")
        return cls(
            name=str(data.get("name") or ""),
            score=_number(data.get("score")),
            max_score=_number(_pick(data, "maxScore", "max_score")),
        )


@dataclass(frozen=True)
class ProgressPoint:
    month: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.month, "score": self.score}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ProgressPoint":
        data = _require_mapping(data, "Progress point")
        return cls(month=str(data.get("month") or ""), score=_number(data.get("score")))


@dataclass(frozen=True)
class AttendanceRecord:
    """Attendance for one calendar day."""

    day: date
    status: str

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.day.isoformat(), "status": self.status}

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AttendanceRecord":
        data = _require_mapping(data, "Attendance record")
        day = parse_iso_date(data.get("date"))
        if day is None:
            raise ValueError(f"Invalid attendance date: {data.get('date')!r}")
        status = str(data.get("status") or "").strip().lower()
        if status not in ATTENDANCE_STATUSES:
            raise ValueError(f"Invalid attendance status: {data.get('status')!r}")
        return cls(day=day, status=status)


@dataclass(frozen=True)
class Performance:
    """Academic performance attached to a student."""

    attendance: int = 0
    assignments: tuple[ScoreEntry, ...] = ()
    exams: tuple[ScoreEntry, ...] = ()
    monthly_progress: tuple[ProgressPoint, ...] = ()
    attendance_records: tuple[AttendanceRecord, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "attendance": self.attendance,
            "assignments": [entry.to_dict() for entry in self.assignments],
            "exams": [entry.to_dict() for entry in self.exams],
            "monthlyProgress": [point.to_dict() for point in self.monthly_progress],
            "attendanceRecords": [record.to_dict() for record in self.attendance_records],
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Performance":
        data = _require_mapping(data, "performance")
        attendance = int(round(_number(data.get("attendance"))))
        if attendance < 0 or attendance > 100:
            raise ValueError("Attendance must be between 0 and 100.")
        return cls(
            attendance=attendance,
            assignments=tuple(
                ScoreEntry.from_mapping(item) for item in _entries(data.get("assignments"), "assignments")
            ),
            exams=tuple(ScoreEntry.from_mapping(item) for item in _entries(data.get("exams"), "exams")),
            monthly_progress=tuple(
                ProgressPoint.from_mapping(item)
                for item in _entries(_pick(data, "monthlyProgress", "monthly_progress"), "monthlyProgress")
            ),
            attendance_records=tuple(
                AttendanceRecord.from_mapping(item)
                for item in _entries(_pick(data, "attendanceRecords", "attendance_records"), "attendanceRecords")
            ),
        )


@dataclass(frozen=True)
class StudentNote:
    id: str
    content: str
    category: str = DEFAULT_NOTE_CATEGORY
    important: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "content": self.content,
            "category": self.category,
            "important": self.important,
            "createdAt": self.created_at.isoformat(),
        }
        if self.updated_at is not None:
            payload["updatedAt"] = self.updated_at.isoformat()
        return payload

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StudentNote":
        data = _require_mapping(data, "Note")
        category = str(data.get("category") or DEFAULT_NOTE_CATEGORY).strip().lower()
        if category not in NOTE_CATEGORIES:
            raise ValueError(f"Invalid note category: {data.get('category')!r}")
        return cls(
            id=str(data.get("id") or ""),
            content=str(data.get("content") or ""),
            category=category,
            important=bool(data.get("important", False)),
            created_at=parse_timestamp(_pick(data, "createdAt", "created_at")) or utcnow(),
            updated_at=parse_timestamp(_pick(data, "updatedAt", "updated_at")),
        )


@dataclass(frozen=True)
class StudentDraft:
    """A student record that has not been assigned an id yet."""

    name: str | None
    email: str | None
    course: str | None
    grade: str | None = None
    enrollment_date: str | None = None
    avatar: str | None = None
    performance: Performance | None = None
    notes: tuple[StudentNote, ...] | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StudentDraft":
        """Build a draft from a wire (camelCase) or attribute (snake_case) mapping."""

        performance = data.get("performance")
        notes = data.get("notes")
        return cls(
            name=_clean_str(data.get("name")),
            email=_clean_str(data.get("email")),
            course=_clean_str(data.get("course")),
            grade=_clean_str(data.get("grade")),
            enrollment_date=_clean_str(_pick(data, "enrollmentDate", "enrollment_date")),
            avatar=_clean_str(data.get("avatar")),
            performance=_coerce_performance(performance),
            notes=_coerce_notes(notes),
        )


@dataclass(frozen=True)
class StudentRecord:
    """One student's stored data."""

    id: int
    name: str
    email: str
    course: str
    grade: str
    enrollment_date: str
    avatar: str
    performance: Performance | None = None
    notes: tuple[StudentNote, ...] | None = None

    @property
    def attendance(self) -> int:
        return self.performance.attendance if self.performance is not None else 0

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "course": self.course,
            "grade": self.grade,
            "enrollmentDate": self.enrollment_date,
            "avatar": self.avatar,
        }
        if self.performance is not None:
            payload["performance"] = self.performance.to_dict()
        if self.notes is not None:
            payload["notes"] = [note.to_dict() for note in self.notes]
        return payload

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "StudentRecord":
        raw_id = data.get("id")
        try:
            record_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid student id: {raw_id!r}") from None
        name = _clean_str(data.get("name")) or ""
        return cls(
            id=record_id,
            name=name,
            email=_clean_str(data.get("email")) or "",
            course=_clean_str(data.get("course")) or "",
            grade=_clean_str(data.get("grade")) or GRADE_PLACEHOLDER,
            enrollment_date=_clean_str(_pick(data, "enrollmentDate", "enrollment_date")) or "",
            avatar=_clean_str(data.get("avatar")) or placeholder_avatar(name),
            performance=_coerce_performance(data.get("performance")),
            notes=_coerce_notes(data.get("notes")),
        )


def _coerce_performance(value: Any) -> Performance | None:
    if value is None or isinstance(value, Performance):
        return value
    if isinstance(value, Mapping):
        return Performance.from_mapping(value)
    raise ValueError("performance must be an object")


def _coerce_notes(value: Any) -> tuple[StudentNote, ...] | None:
    if value is None:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ValueError("notes must be a list")
    return tuple(note if isinstance(note, StudentNote) else StudentNote.from_mapping(note) for note in value)
