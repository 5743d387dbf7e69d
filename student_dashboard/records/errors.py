"""Exception hierarchy shared by the student records core."""

from __future__ import annotations

from typing import Sequence


class StudentRecordsError(Exception):
    """Base exception for student records failures."""


class RecordValidationError(StudentRecordsError):
    """Raised when a record (or a change to one) breaks a field invariant."""

    def __init__(self, message: str, *, fields: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.fields = tuple(fields or ())


class StudentNotFoundError(StudentRecordsError):
    """Raised when an operation targets a student id that does not exist."""

    def __init__(self, student_id: object) -> None:
        super().__init__(f"Student with ID {student_id} not found")
        self.student_id = student_id


class NoteNotFoundError(StudentRecordsError):
    """Raised when a note id does not exist on the targeted student."""

    def __init__(self, student_id: object, note_id: object) -> None:
        super().__init__(f"Note with ID {note_id} not found")
        self.student_id = student_id
        self.note_id = note_id


class TransportError(StudentRecordsError):
    """Raised when a persistence or HTTP boundary call fails."""


class CSVParseError(StudentRecordsError):
    """Raised when CSV text is structurally unreadable (nothing to salvage)."""


class ImportModeRequired(StudentRecordsError):
    """Raised when an import targets a non-empty collection without a chosen mode."""

    def __init__(self, existing_count: int, incoming_count: int) -> None:
        super().__init__(
            f"The collection already holds {existing_count} students and the import carries "
            f"{incoming_count}. Choose 'merge' to keep existing records or 'replace' to clear them first."
        )
        self.existing_count = existing_count
        self.incoming_count = incoming_count
