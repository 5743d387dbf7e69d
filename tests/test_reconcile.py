from datetime import date

import pytest

from student_dashboard.records import (
    ImportMode,
    ImportModeRequired,
    StudentDraft,
    StudentStore,
    export_csv,
    export_filename,
    import_csv,
    reconcile,
    validate_rows,
)
from student_dashboard.records.reconcile import export_rows
from student_dashboard.records.seed import SAMPLE_STUDENTS

TODAY = date(2024, 2, 29)


def _rows(count, start=1):
    return [
        {"name": f"Student {index}", "email": f"s{index}@example.com", "course": "Physics"}
        for index in range(start, start + count)
    ]


def _drafts(count, start=1):
    return validate_rows(_rows(count, start), today=TODAY).normalized


def test_validate_rows_partial_failure():
    rows = _rows(3) + [{"name": "No Email", "email": "", "course": "Physics"}]

    result = validate_rows(rows, today=TODAY)

    assert len(result.normalized) == 3
    assert not result.ok
    assert [error.to_dict() for error in result.errors] == [
        {"row": 4, "field": "email", "message": "Row 4: Missing email"}
    ]


def test_validate_rows_reports_every_problem_in_a_row():
    result = validate_rows([{"name": "", "email": "", "course": "Art", "grade": "Q"}], today=TODAY)

    assert [error.field for error in result.errors] == ["name", "email", "grade"]
    assert result.normalized == ()


def test_validate_rows_applies_defaults():
    result = validate_rows(
        [
            {"name": "Ada Lovelace", "email": "ada@example.com", "course": "Maths"},
            {
                "name": "Alan",
                "email": "alan@example.com",
                "course": "CS",
                "grade": "a-",
                "enrollmentDate": "2023-09-01",
                "avatar": "https://example.com/alan.png",
            },
        ],
        today=TODAY,
    )

    first, second = result.normalized
    assert first.grade == "N/A"
    assert first.enrollment_date == "2024-02-29"
    assert first.avatar == "https://ui-avatars.com/api/?name=Ada%20Lovelace&background=random"
    assert second.grade == "A-"
    assert second.enrollment_date == "2023-09-01"
    assert second.avatar == "https://example.com/alan.png"


def test_validate_rows_rejects_non_iso_dates():
    result = validate_rows(
        [{"name": "Ada", "email": "ada@example.com", "course": "Maths", "enrollmentDate": "1/2/2023"}],
        today=TODAY,
    )

    assert result.errors[0].field == "enrollmentDate"


def test_merge_keeps_existing_and_assigns_fresh_ids():
    store = StudentStore()
    for draft in _drafts(5):
        store.add(draft)

    summary = reconcile(store, _drafts(2, start=6), ImportMode.MERGE)

    ids = [record.id for record in store.list_records()]
    assert len(ids) == 7
    assert len(set(ids)) == 7
    assert summary.imported_count == 2
    assert summary.removed == 0
    assert summary.existing_before == 5


def test_replace_clears_then_adds():
    store = StudentStore(SAMPLE_STUDENTS)

    summary = reconcile(store, _drafts(2), "replace")

    assert len(store) == 2
    assert summary.mode is ImportMode.REPLACE
    assert summary.removed == 8
    assert [record.id for record in store.list_records()] == [9, 10]


def test_non_empty_collection_without_mode_requires_decision():
    store = StudentStore(SAMPLE_STUDENTS)

    with pytest.raises(ImportModeRequired) as excinfo:
        reconcile(store, _drafts(2))

    assert (excinfo.value.existing_count, excinfo.value.incoming_count) == (8, 2)
    assert len(store) == 8


def test_empty_collection_without_mode_merges():
    store = StudentStore()

    summary = reconcile(store, _drafts(3))

    assert summary.mode is ImportMode.MERGE
    assert len(store) == 3


def test_replace_with_nothing_to_import_clears_collection():
    store = StudentStore(SAMPLE_STUDENTS)

    summary = reconcile(store, [], ImportMode.REPLACE)

    assert len(store) == 0
    assert summary.imported_count == 0
    assert summary.removed == 8


def test_merge_with_nothing_to_import_leaves_collection_untouched():
    store = StudentStore(SAMPLE_STUDENTS)

    for mode in (ImportMode.MERGE, None):
        summary = reconcile(store, [], mode)
        assert summary.removed == 0

    assert len(store) == 8


@pytest.mark.parametrize("text", ["name,email,course\n", "name,email,course\nBad,,Maths\n"])
def test_replace_import_without_valid_rows_empties_store(text):
    store = StudentStore(SAMPLE_STUDENTS)

    report = import_csv(store, text, "replace", today=TODAY)

    assert len(store) == 0
    assert report.summary.removed == 8
    assert report.summary.imported_count == 0


def test_reconcile_accepts_plain_drafts():
    store = StudentStore()

    summary = reconcile(store, [StudentDraft(name="Ada", email="ada@example.com", course="Maths")])

    assert summary.imported[0].id == 1


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        ImportMode.coerce("append")
    assert ImportMode.coerce("  ") is None
    assert ImportMode.coerce("MERGE") is ImportMode.MERGE


def test_import_csv_reports_errors_and_diagnostics():
    store = StudentStore()
    text = (
        "name,email,course\n"
        "Ada,ada@example.com,Maths\n"
        "Bad Row,,Maths\n"
        "Alan,alan@example.com\n"
    )

    report = import_csv(store, text, today=TODAY)

    assert report.summary.imported_count == 1
    assert [error.row for error in report.errors] == [2, 3]
    assert report.diagnostics == ("Line 4 has 2 values, expected 3.",)
    payload = report.to_dict()
    assert payload["importedCount"] == 1
    assert payload["mode"] == "merge"


def test_export_projects_core_fields_only():
    store = StudentStore(SAMPLE_STUDENTS)
    store.add_note(1, "Private note")

    rows = export_rows(store.list_records()[:1])

    assert rows == [
        {
            "name": "John Doe",
            "email": "john.doe@example.com",
            "course": "Computer Science",
            "grade": "A",
            "enrollmentDate": "2023-09-01",
        }
    ]


def test_export_then_import_round_trip():
    source = StudentStore(SAMPLE_STUDENTS)
    target = StudentStore()

    report = import_csv(target, export_csv(source.list_records()), today=TODAY)

    assert report.errors == ()
    assert [(r.name, r.email, r.grade, r.enrollment_date) for r in target.list_records()] == [
        (r.name, r.email, r.grade, r.enrollment_date) for r in source.list_records()
    ]


def test_export_filename_uses_iso_date():
    assert export_filename(date(2024, 1, 31)) == "student_data_2024-01-31.csv"
