"""
Filter and sort engine for the student list.

``apply_filters`` is a pure function: every supplied predicate is ANDed, the
surviving records are ordered by a stable sort, and the input sequence is never
modified. Unknown sort keys fall back to input order instead of raising.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, Mapping

from .types import GRADES, StudentRecord, parse_iso_date

SORT_NAME = "name"
SORT_GRADE = "grade"
SORT_ENROLLMENT_DATE = "enrollmentDate"
SORT_PERFORMANCE = "performance"
SORT_KEYS: tuple[str, ...] = (SORT_NAME, SORT_GRADE, SORT_ENROLLMENT_DATE, SORT_PERFORMANCE)

SORT_ASC = "asc"
SORT_DESC = "desc"
SORT_DIRECTIONS: tuple[str, ...] = (SORT_ASC, SORT_DESC)

# Accepts the combined options of the list view ("date_desc", "performance_asc", ...).
_SORT_ALIASES = {
    "name": SORT_NAME,
    "grade": SORT_GRADE,
    "date": SORT_ENROLLMENT_DATE,
    "enrollmentdate": SORT_ENROLLMENT_DATE,
    "enrollment_date": SORT_ENROLLMENT_DATE,
    "performance": SORT_PERFORMANCE,
    "attendance": SORT_PERFORMANCE,
}

# F=0 ... A+=12; anything else (N/A, blanks, typos) sorts below F.
GRADE_RANK: dict[str, int] = {grade: len(GRADES) - 1 - index for index, grade in enumerate(GRADES)}
UNRANKED_GRADE = -1

PERFORMANCE_MIN = 0
PERFORMANCE_MAX = 100


@dataclass(frozen=True)
class FilterSpec:
    """Declarative description of which students to show and in what order."""

    search: str | None = None
    name_contains: str | None = None
    email_contains: str | None = None
    course: str | None = None
    grade: str | None = None
    enrollment_date_from: date | None = None
    enrollment_date_to: date | None = None
    performance_range: tuple[int, int] | None = None
    sort_key: str | None = None
    sort_direction: str = SORT_ASC

    @classmethod
    def coerce(
        cls,
        *,
        search: str | None = None,
        name: str | None = None,
        email: str | None = None,
        course: str | None = None,
        grade: str | None = None,
        enrollment_date_from: str | date | None = None,
        enrollment_date_to: str | date | None = None,
        performance_min: int | str | None = None,
        performance_max: int | str | None = None,
        sort: str | None = None,
        direction: str | None = None,
    ) -> "FilterSpec":
        """
        Coerce mixed user input into a ``FilterSpec``.

        Raises ``ValueError`` for malformed dates or performance bounds. Sort
        options are never rejected; unknown keys simply keep input order.
        """

        performance_range = None
        if _blank_to_none(performance_min) is not None or _blank_to_none(performance_max) is not None:
            performance_range = (
                _coerce_bound(performance_min, "performance_min", PERFORMANCE_MIN),
                _coerce_bound(performance_max, "performance_max", PERFORMANCE_MAX),
            )

        sort_key, sort_direction = _coerce_sort(sort, direction)

        return cls(
            search=_blank_to_none(search),
            name_contains=_blank_to_none(name),
            email_contains=_blank_to_none(email),
            course=_blank_to_none(course),
            grade=_blank_to_none(grade),
            enrollment_date_from=_coerce_date(enrollment_date_from, "enrollment_date_from"),
            enrollment_date_to=_coerce_date(enrollment_date_to, "enrollment_date_to"),
            performance_range=performance_range,
            sort_key=sort_key,
            sort_direction=sort_direction,
        )

    @classmethod
    def from_query_args(cls, args: Mapping[str, Any]) -> "FilterSpec":
        """Build a spec from ``/api/students`` query parameters."""

        return cls.coerce(
            search=args.get("search"),
            name=args.get("name"),
            email=args.get("email"),
            course=args.get("course"),
            grade=args.get("grade"),
            enrollment_date_from=args.get("enrollmentDateFrom"),
            enrollment_date_to=args.get("enrollmentDateTo"),
            performance_min=args.get("performanceMin"),
            performance_max=args.get("performanceMax"),
            sort=args.get("sort"),
            direction=args.get("direction"),
        )


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _coerce_date(value: str | date | None, label: str) -> date | None:
    value = _blank_to_none(value)
    if value is None:
        return None
    parsed = parse_iso_date(value)
    if parsed is None:
        raise ValueError(f"{label} must be an ISO date (YYYY-MM-DD).")
    return parsed


def _coerce_bound(value: int | str | None, label: str, fallback: int) -> int:
    value = _blank_to_none(value)
    if value is None:
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be an integer.") from None


def _coerce_sort(sort: str | None, direction: str | None) -> tuple[str | None, str]:
    token = _blank_to_none(sort)
    resolved_direction = (_blank_to_none(direction) or SORT_ASC).lower()
    if token is None:
        return None, resolved_direction if resolved_direction in SORT_DIRECTIONS else SORT_ASC

    head, _, tail = token.rpartition("_")
    if head and tail.lower() in SORT_DIRECTIONS:
        token, resolved_direction = head, tail.lower()
    if resolved_direction not in SORT_DIRECTIONS:
        resolved_direction = SORT_ASC
    return _SORT_ALIASES.get(token.lower(), token), resolved_direction


def grade_rank(grade: str | None) -> int:
    if not grade:
        return UNRANKED_GRADE
    return GRADE_RANK.get(grade.strip().upper(), UNRANKED_GRADE)


def name_collation_key(name: str | None) -> tuple[str, str, str]:
    """
    Locale-style collation key.

    Primary strength ignores accents and case, secondary keeps accents,
    tertiary falls back to the raw string.
    """

    text = name or ""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return base.casefold(), text.casefold(), text


def _enrollment_sort_key(record: StudentRecord) -> date:
    return parse_iso_date(record.enrollment_date) or date.min


_SORT_KEY_FUNCS: dict[str, Callable[[StudentRecord], Any]] = {
    SORT_NAME: lambda record: name_collation_key(record.name),
    SORT_GRADE: lambda record: grade_rank(record.grade),
    SORT_ENROLLMENT_DATE: _enrollment_sort_key,
    SORT_PERFORMANCE: lambda record: record.attendance,
}


def matches(record: StudentRecord, spec: FilterSpec) -> bool:
    """Return True when ``record`` satisfies every predicate in ``spec``."""

    if spec.search:
        needle = spec.search.casefold()
        if needle not in (record.name or "").casefold() and needle not in (record.email or "").casefold():
            return False
    if spec.name_contains and spec.name_contains.casefold() not in (record.name or "").casefold():
        return False
    if spec.email_contains and spec.email_contains.casefold() not in (record.email or "").casefold():
        return False
    if spec.course and record.course != spec.course:
        return False
    if spec.grade and record.grade != spec.grade:
        return False

    if spec.enrollment_date_from or spec.enrollment_date_to:
        enrolled = parse_iso_date(record.enrollment_date)
        if enrolled is None:
            return False
        if spec.enrollment_date_from and enrolled < spec.enrollment_date_from:
            return False
        if spec.enrollment_date_to and enrolled > spec.enrollment_date_to:
            return False

    if spec.performance_range is not None:
        low, high = spec.performance_range
        if not low <= record.attendance <= high:
            return False

    return True


def sort_records(
    records: Iterable[StudentRecord],
    sort_key: str | None,
    direction: str = SORT_ASC,
) -> list[StudentRecord]:
    """Stable sort; unknown or missing keys keep input order."""

    ordered = list(records)
    key_func = _SORT_KEY_FUNCS.get(sort_key) if sort_key else None
    if key_func is None:
        return ordered
    # sorted() keeps equal elements in input order even with reverse=True.
    return sorted(ordered, key=key_func, reverse=direction == SORT_DESC)


def apply_filters(records: Iterable[StudentRecord], spec: FilterSpec | None = None) -> list[StudentRecord]:
    """Produce the visible subset of ``records`` in deterministic order."""

    spec = spec or FilterSpec()
    if spec.performance_range is not None:
        low, high = spec.performance_range
        if low > high:
            return []

    visible = [record for record in records if matches(record, spec)]
    return sort_records(visible, spec.sort_key, spec.sort_direction)
