"""
Student records core: collection store, filter/sort engine, CSV codec and
import reconciler.
"""

from .csv_codec import DecodedCSV, decode_csv, encode_csv
from .errors import (
    CSVParseError,
    ImportModeRequired,
    NoteNotFoundError,
    RecordValidationError,
    StudentNotFoundError,
    StudentRecordsError,
    TransportError,
)
from .filters import FilterSpec, apply_filters, grade_rank
from .reconcile import (
    ImportMode,
    ImportReport,
    ImportSummary,
    RowError,
    ValidationResult,
    export_csv,
    export_filename,
    export_rows,
    import_csv,
    reconcile,
    validate_rows,
)
from .store import StudentStore
from .types import Performance, StudentDraft, StudentNote, StudentRecord

__all__ = [
    "CSVParseError",
    "DecodedCSV",
    "FilterSpec",
    "ImportMode",
    "ImportModeRequired",
    "ImportReport",
    "ImportSummary",
    "NoteNotFoundError",
    "Performance",
    "RecordValidationError",
    "RowError",
    "StudentDraft",
    "StudentNote",
    "StudentNotFoundError",
    "StudentRecord",
    "StudentRecordsError",
    "StudentStore",
    "TransportError",
    "ValidationResult",
    "apply_filters",
    "decode_csv",
    "encode_csv",
    "export_csv",
    "export_filename",
    "export_rows",
    "grade_rank",
    "import_csv",
    "reconcile",
    "validate_rows",
]
