"""
In-memory collection store for student records.

The store is the single authority over record ids. Ids are monotonic per
store instance: the next id is one above the highest id ever issued or
adopted, so removing the newest record never recycles its id.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Iterable, Mapping

from .errors import NoteNotFoundError, RecordValidationError, StudentNotFoundError
from .notes import edit_note, new_note
from .performance import mark_attendance
from .types import (
    DEFAULT_AVATAR_TEMPLATE,
    GRADE_PLACEHOLDER,
    MERGEABLE_FIELDS,
    Performance,
    StudentDraft,
    StudentNote,
    StudentRecord,
    normalize_grade,
    parse_iso_date,
    placeholder_avatar,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS: tuple[str, ...] = ("name", "email", "course")


class StudentStore:
    """Holds the authoritative student collection keyed by id."""

    def __init__(
        self,
        records: Iterable[StudentRecord | Mapping[str, Any]] = (),
        *,
        avatar_template: str = DEFAULT_AVATAR_TEMPLATE,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._records: dict[int, StudentRecord] = {}
        self._high_water_id = 0
        self._avatar_template = avatar_template
        self._today = today
        if records:
            self.replace_all(records)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    @property
    def last_issued_id(self) -> int:
        return self._high_water_id

    def list_records(self) -> list[StudentRecord]:
        """Return a snapshot of the collection in insertion order."""

        return list(self._records.values())

    def get(self, record_id: int) -> StudentRecord:
        try:
            return self._records[record_id]
        except KeyError:
            raise StudentNotFoundError(record_id) from None

    def add(self, draft: StudentDraft | Mapping[str, Any]) -> StudentRecord:
        """Create a record from ``draft``, assigning the next id and filling defaults."""

        if not isinstance(draft, StudentDraft):
            try:
                draft = StudentDraft.from_mapping(draft)
            except ValueError as exc:
                raise RecordValidationError(str(exc)) from exc

        missing = [name for name in REQUIRED_FIELDS if not (getattr(draft, name) or "").strip()]
        if missing:
            raise RecordValidationError(f"Missing required fields: {', '.join(missing)}.", fields=missing)

        grade = GRADE_PLACEHOLDER
        if draft.grade:
            grade = normalize_grade(draft.grade)
            if grade is None:
                raise RecordValidationError(f"Unknown grade '{draft.grade}'.", fields=["grade"])

        enrolled = parse_iso_date(draft.enrollment_date) if draft.enrollment_date else self._today()
        if enrolled is None:
            raise RecordValidationError(
                f"Enrollment date '{draft.enrollment_date}' is not an ISO date.", fields=["enrollment_date"]
            )
        enrollment_date = enrolled.isoformat()

        record = StudentRecord(
            id=self._next_id(),
            name=draft.name,
            email=draft.email,
            course=draft.course,
            grade=grade,
            enrollment_date=enrollment_date,
            avatar=draft.avatar or placeholder_avatar(draft.name, self._avatar_template),
            performance=draft.performance,
            notes=draft.notes,
        )
        self._records[record.id] = record
        logger.debug("Added student %s (%s)", record.id, record.email)
        return record

    def remove(self, record_id: int) -> StudentRecord:
        try:
            record = self._records.pop(record_id)
        except KeyError:
            raise StudentNotFoundError(record_id) from None
        logger.debug("Removed student %s", record_id)
        return record

    def update(self, record_id: int, changes: Mapping[str, Any]) -> StudentRecord:
        """
        Merge ``changes`` into the record field by field.

        Accepts wire or attribute names for name, email, course, grade,
        enrollment date and avatar. ``id`` and unknown keys are ignored.
        """

        current = self.get(record_id)
        updates: dict[str, Any] = {}
        for wire_name, attr_name in MERGEABLE_FIELDS:
            if wire_name in changes:
                value = changes[wire_name]
            elif attr_name in changes:
                value = changes[attr_name]
            else:
                continue
            updates[attr_name] = value.strip() if isinstance(value, str) else value

        ignored = set(changes) - {name for pair in MERGEABLE_FIELDS for name in pair}
        if ignored:
            logger.debug("Ignoring non-mergeable fields for student %s: %s", record_id, sorted(ignored))

        blank = [name for name in REQUIRED_FIELDS if name in updates and not updates[name]]
        if blank:
            raise RecordValidationError(f"Fields cannot be blank: {', '.join(blank)}.", fields=blank)

        if "grade" in updates:
            grade = normalize_grade(updates["grade"])
            if grade is None:
                raise RecordValidationError(f"Unknown grade '{updates['grade']}'.", fields=["grade"])
            updates["grade"] = grade

        if "enrollment_date" in updates:
            enrolled = parse_iso_date(updates["enrollment_date"])
            if enrolled is None:
                raise RecordValidationError(
                    f"Enrollment date '{updates['enrollment_date']}' is not an ISO date.",
                    fields=["enrollment_date"],
                )
            updates["enrollment_date"] = enrolled.isoformat()

        if "avatar" in updates and not updates["avatar"]:
            updates["avatar"] = placeholder_avatar(updates.get("name", current.name), self._avatar_template)

        merged = replace(current, **updates)
        self._records[record_id] = merged
        return merged

    def replace_all(self, records: Iterable[StudentRecord | Mapping[str, Any]]) -> None:
        """
        Swap in a whole new collection.

        The replacement is built completely before being installed, so a
        failure (duplicate ids) leaves the current collection untouched.
        """

        replacement: dict[int, StudentRecord] = {}
        for item in records:
            try:
                record = item if isinstance(item, StudentRecord) else StudentRecord.from_mapping(item)
            except ValueError as exc:
                raise RecordValidationError(str(exc)) from exc
            if record.id in replacement:
                raise RecordValidationError(f"Duplicate student id {record.id}.", fields=["id"])
            replacement[record.id] = record

        self._records = replacement
        if replacement:
            self._high_water_id = max(self._high_water_id, max(replacement))
        logger.info("Replaced student collection (%s records)", len(replacement))

    def clear(self) -> None:
        self._records = {}
        logger.info("Cleared student collection")

    def set_performance(self, record_id: int, performance: Performance | Mapping[str, Any] | None) -> StudentRecord:
        current = self.get(record_id)
        if performance is not None and not isinstance(performance, Performance):
            try:
                performance = Performance.from_mapping(performance)
            except ValueError as exc:
                raise RecordValidationError(str(exc), fields=["performance"]) from exc
        updated = replace(current, performance=performance)
        self._records[record_id] = updated
        return updated

    def mark_attendance(self, record_id: int, day: date, status: str) -> StudentRecord:
        """Record attendance for one day; the last write for a day wins."""

        current = self.get(record_id)
        try:
            performance = mark_attendance(current.performance, day, status)
        except ValueError as exc:
            raise RecordValidationError(str(exc), fields=["status"]) from exc
        updated = replace(current, performance=performance)
        self._records[record_id] = updated
        return updated

    def add_note(
        self,
        record_id: int,
        content: str,
        *,
        category: str | None = None,
        important: bool = False,
    ) -> StudentNote:
        current = self.get(record_id)
        try:
            note = new_note(content, category=category, important=important)
        except ValueError as exc:
            raise RecordValidationError(str(exc), fields=["note"]) from exc
        self._records[record_id] = replace(current, notes=(current.notes or ()) + (note,))
        return note

    def update_note(
        self,
        record_id: int,
        note_id: str,
        *,
        content: str | None = None,
        category: str | None = None,
        important: bool | None = None,
    ) -> StudentNote:
        current = self.get(record_id)
        notes = list(current.notes or ())
        for index, note in enumerate(notes):
            if note.id == note_id:
                try:
                    notes[index] = edit_note(note, content=content, category=category, important=important)
                except ValueError as exc:
                    raise RecordValidationError(str(exc), fields=["note"]) from exc
                self._records[record_id] = replace(current, notes=tuple(notes))
                return notes[index]
        raise NoteNotFoundError(record_id, note_id)

    def delete_note(self, record_id: int, note_id: str) -> None:
        current = self.get(record_id)
        notes = tuple(note for note in current.notes or () if note.id != note_id)
        if len(notes) == len(current.notes or ()):
            raise NoteNotFoundError(record_id, note_id)
        self._records[record_id] = replace(current, notes=notes)

    def _next_id(self) -> int:
        highest = max(self._records, default=0)
        self._high_water_id = max(self._high_water_id, highest) + 1
        return self._high_water_id
