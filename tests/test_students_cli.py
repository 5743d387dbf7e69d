import json
from unittest.mock import patch

from student_dashboard.records import StudentRecord
from student_dashboard.records.seed import SAMPLE_STUDENTS

CSV_TEXT = (
    "name,email,course,grade,enrollmentDate\n"
    "Ada Lovelace,ada@example.com,Mathematics,A,2023-09-01\n"
    "Alan Turing,alan@example.com,Computer Science,B+,2023-09-02\n"
)


def test_list_prints_table(runner, seeded_store):
    result = runner.invoke(args=["students", "list", "--course", "Physics"])

    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines == [
        "3\tRobert Johnson\trobert.johnson@example.com\tPhysics\tA-\t2023-09-05",
        "6\tSarah Brown\tsarah.brown@example.com\tPhysics\tB-\t2023-09-03",
    ]


def test_list_json_sorted(runner, seeded_store):
    result = runner.invoke(args=["students", "list", "--sort", "grade", "--direction", "desc", "--json"])

    assert result.exit_code == 0, result.output
    grades = [student["grade"] for student in json.loads(result.output)]
    assert grades[:2] == ["A+", "A"]


def test_list_rejects_bad_date(runner, seeded_store):
    result = runner.invoke(args=["students", "list", "--from", "soon"])

    assert result.exit_code != 0


def test_list_empty(runner, store):
    result = runner.invoke(args=["students", "list"])

    assert result.exit_code == 0
    assert "No students found." in result.output


def test_import_requires_mode_for_populated_store(runner, seeded_store, tmp_path):
    csv_path = tmp_path / "students.csv"
    csv_path.write_text(CSV_TEXT, encoding="utf-8")

    result = runner.invoke(args=["students", "import", str(csv_path)])

    assert result.exit_code != 0
    assert "Choose 'merge'" in result.output
    assert len(seeded_store) == 8


def test_import_replace(runner, seeded_store, tmp_path):
    csv_path = tmp_path / "students.csv"
    csv_path.write_text(CSV_TEXT, encoding="utf-8")

    result = runner.invoke(args=["students", "import", str(csv_path), "--mode", "replace"])

    assert result.exit_code == 0, result.output
    assert "Imported 2 students (mode=replace, existing=8, removed=8" in result.output
    assert [record.name for record in seeded_store.list_records()] == ["Ada Lovelace", "Alan Turing"]


def test_import_summary_json(runner, store, tmp_path):
    csv_path = tmp_path / "students.csv"
    csv_path.write_text(CSV_TEXT, encoding="utf-8")

    result = runner.invoke(args=["students", "import", str(csv_path), "--summary-json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["importedCount"] == 2


def test_export_to_file(runner, seeded_store, tmp_path):
    output = tmp_path / "export.csv"

    result = runner.invoke(args=["students", "export", "--output", str(output)])

    assert result.exit_code == 0, result.output
    text = output.read_text(encoding="utf-8")
    assert text.splitlines()[0] == '"name","email","course","grade","enrollmentDate"'
    assert len(text.splitlines()) == 9


def test_export_to_stdout(runner, seeded_store):
    result = runner.invoke(args=["students", "export"])

    assert result.exit_code == 0
    assert '"John Doe","john.doe@example.com"' in result.output


def test_list_against_remote_service(runner):
    remote = [SAMPLE_STUDENTS[0], StudentRecord(20, "Remote Only", "r@example.com", "Art", "C", "2024-01-01", "x")]

    with patch("student_dashboard.cli.HttpStudentTransport") as transport_cls:
        transport_cls.return_value.list_students.return_value = remote
        result = runner.invoke(args=["students", "list", "--api-url", "http://students.internal", "--name", "remote"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "20\tRemote Only\tr@example.com\tArt\tC\t2024-01-01"
    assert transport_cls.call_args.args == ("http://students.internal",)


def test_list_search_matches_name_or_email(runner, seeded_store):
    result = runner.invoke(args=["students", "list", "--search", "SMITH"])

    assert result.exit_code == 0, result.output
    assert result.output.strip() == "2\tJane Smith\tjane.smith@example.com\tMathematics\tB+\t2023-08-15"
