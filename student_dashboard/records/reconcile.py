"""
Import validation, reconciliation and export projection.

Row validation follows a partial-failure policy: a malformed row is reported
and skipped, every other row still imports. Choosing between merging into
and replacing a non-empty collection is an explicit caller decision; the
reconciler raises ``ImportModeRequired`` instead of picking a default.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Iterable, Mapping, Protocol, Sequence

from .csv_codec import decode_csv, encode_csv
from .errors import ImportModeRequired
from .types import (
    DEFAULT_AVATAR_TEMPLATE,
    GRADE_PLACEHOLDER,
    StudentDraft,
    StudentRecord,
    normalize_grade,
    parse_iso_date,
    placeholder_avatar,
)

logger = logging.getLogger(__name__)

REQUIRED_IMPORT_FIELDS: tuple[str, ...] = ("name", "email", "course")
EXPORT_FIELDS: tuple[str, ...] = ("name", "email", "course", "grade", "enrollmentDate")
EXPORT_FILENAME_TEMPLATE = "student_data_{day}.csv"


class ImportMode(str, Enum):
    MERGE = "merge"
    REPLACE = "replace"

    @classmethod
    def coerce(cls, value: "ImportMode | str | None") -> "ImportMode | None":
        """Parse a user-supplied mode; blanks mean "not chosen yet"."""

        if value is None or isinstance(value, cls):
            return value
        token = str(value).strip().lower()
        if not token:
            return None
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Unsupported import mode '{value}'. Use 'merge' or 'replace'.") from None


class StudentCollection(Protocol):
    """The slice of the collection store the reconciler writes through."""

    def list_records(self) -> list[StudentRecord]: ...

    def add(self, draft: StudentDraft) -> StudentRecord: ...

    def clear(self) -> None: ...


@dataclass(frozen=True)
class RowError:
    """A validation problem tied to one data row (1-based)."""

    row: int
    message: str
    field: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "field": self.field, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    errors: tuple[RowError, ...]
    normalized: tuple[StudentDraft, ...]

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ImportSummary:
    """Outcome of reconciling validated rows into a collection."""

    mode: ImportMode
    existing_before: int
    removed: int
    imported: tuple[StudentRecord, ...] = ()

    @property
    def imported_count(self) -> int:
        return len(self.imported)

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode.value,
            "existingBefore": self.existing_before,
            "removed": self.removed,
            "importedCount": self.imported_count,
            "imported": [record.to_dict() for record in self.imported],
        }


@dataclass(frozen=True)
class ImportReport:
    """Full result of a CSV import: reconciliation plus the non-fatal findings."""

    summary: ImportSummary
    errors: tuple[RowError, ...] = ()
    diagnostics: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        payload = self.summary.to_dict()
        payload["errors"] = [error.to_dict() for error in self.errors]
        payload["diagnostics"] = list(self.diagnostics)
        return payload


def _field_value(row: Mapping[str, Any], name: str) -> str:
    value = row.get(name)
    if value is None:
        return ""
    return str(value).strip()


def validate_rows(
    rows: Sequence[Mapping[str, Any]],
    *,
    today: date | None = None,
    avatar_template: str = DEFAULT_AVATAR_TEMPLATE,
) -> ValidationResult:
    """
    Validate parsed CSV rows and normalize the valid ones into drafts.

    Every problem yields its own ``RowError``. Defaults: grade ``N/A``,
    enrollment date ``today``, avatar generated from the name.
    """

    today = today or date.today()
    errors: list[RowError] = []
    normalized: list[StudentDraft] = []

    for index, row in enumerate(rows, start=1):
        row_errors: list[RowError] = []
        for name in REQUIRED_IMPORT_FIELDS:
            if not _field_value(row, name):
                row_errors.append(RowError(row=index, field=name, message=f"Row {index}: Missing {name}"))

        raw_grade = _field_value(row, "grade")
        grade = normalize_grade(raw_grade) if raw_grade else GRADE_PLACEHOLDER
        if grade is None:
            row_errors.append(RowError(row=index, field="grade", message=f"Row {index}: Unknown grade '{raw_grade}'"))

        raw_date = _field_value(row, "enrollmentDate")
        if raw_date and parse_iso_date(raw_date) is None:
            row_errors.append(
                RowError(
                    row=index,
                    field="enrollmentDate",
                    message=f"Row {index}: Enrollment date '{raw_date}' is not an ISO date",
                )
            )

        if row_errors:
            errors.extend(row_errors)
            continue

        name = _field_value(row, "name")
        normalized.append(
            StudentDraft(
                name=name,
                email=_field_value(row, "email"),
                course=_field_value(row, "course"),
                grade=grade,
                enrollment_date=parse_iso_date(raw_date).isoformat() if raw_date else today.isoformat(),
                avatar=_field_value(row, "avatar") or placeholder_avatar(name, avatar_template),
            )
        )

    if errors:
        logger.info("Import validation rejected %s problem(s) across %s rows", len(errors), len(rows))
    return ValidationResult(errors=tuple(errors), normalized=tuple(normalized))


def reconcile(
    collection: StudentCollection,
    drafts: Iterable[StudentDraft],
    mode: ImportMode | str | None = None,
) -> ImportSummary:
    """
    Combine ``drafts`` with the existing collection.

    ``replace`` clears the collection first; ``merge`` only adds. Ids always
    come from the collection. An explicit ``replace`` clears the collection
    even when no rows survived validation; otherwise an empty import is a
    no-op.
    """

    drafts = tuple(drafts)
    resolved_mode = ImportMode.coerce(mode)
    existing_count = len(collection.list_records())

    if not drafts and resolved_mode is not ImportMode.REPLACE:
        return ImportSummary(
            mode=resolved_mode or ImportMode.MERGE,
            existing_before=existing_count,
            removed=0,
        )

    if resolved_mode is None:
        if existing_count:
            raise ImportModeRequired(existing_count, len(drafts))
        resolved_mode = ImportMode.MERGE

    removed = 0
    if resolved_mode is ImportMode.REPLACE:
        collection.clear()
        removed = existing_count

    imported = tuple(collection.add(draft) for draft in drafts)
    logger.info(
        "Imported %s students (mode=%s, existing=%s, removed=%s)",
        len(imported),
        resolved_mode.value,
        existing_count,
        removed,
    )
    return ImportSummary(
        mode=resolved_mode,
        existing_before=existing_count,
        removed=removed,
        imported=imported,
    )


def import_csv(
    collection: StudentCollection,
    text: str,
    mode: ImportMode | str | None = None,
    *,
    today: date | None = None,
    avatar_template: str = DEFAULT_AVATAR_TEMPLATE,
) -> ImportReport:
    """Decode, validate and reconcile CSV text in one step."""

    decoded = decode_csv(text)
    validation = validate_rows(decoded.rows, today=today, avatar_template=avatar_template)
    summary = reconcile(collection, validation.normalized, mode)
    return ImportReport(summary=summary, errors=validation.errors, diagnostics=decoded.diagnostics)


def export_rows(records: Iterable[StudentRecord]) -> list[dict[str, str]]:
    """Project records onto the portable core fields."""

    rows = []
    for record in records:
        wire = record.to_dict()
        rows.append({name: wire.get(name) or "" for name in EXPORT_FIELDS})
    return rows


def export_csv(records: Iterable[StudentRecord]) -> str:
    return encode_csv(export_rows(records), headers=EXPORT_FIELDS)


def export_filename(day: date | None = None) -> str:
    return EXPORT_FILENAME_TEMPLATE.format(day=(day or date.today()).isoformat())
