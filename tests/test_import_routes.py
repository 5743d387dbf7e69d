import io
from datetime import date

from student_dashboard.records import decode_csv

CSV_TEXT = (
    "name,email,course,grade,enrollmentDate\n"
    "Ada Lovelace,ada@example.com,Mathematics,A,2023-09-01\n"
    "Alan Turing,alan@example.com,Computer Science,,\n"
)


def _upload(client, text, mode=None, filename="students.csv"):
    data = {"file": (io.BytesIO(text.encode("utf-8")), filename)}
    if mode:
        data["mode"] = mode
    return client.post("/api/students/import", data=data, content_type="multipart/form-data")


def test_import_into_empty_collection_needs_no_mode(client, store):
    response = _upload(client, CSV_TEXT)

    assert response.status_code == 200
    data = response.get_json()
    assert data["importedCount"] == 2
    assert data["mode"] == "merge"
    assert data["errors"] == []
    assert [record["id"] for record in data["imported"]] == [1, 2]
    assert store.get(2).grade == "N/A"


def test_import_into_populated_collection_requires_mode(client, seeded_store):
    response = _upload(client, CSV_TEXT)

    assert response.status_code == 409
    data = response.get_json()
    assert (data["existing"], data["incoming"]) == (8, 2)
    assert len(seeded_store) == 8


def test_import_merge_and_replace(client, seeded_store):
    merged = _upload(client, CSV_TEXT, mode="merge").get_json()
    assert merged["importedCount"] == 2
    assert len(seeded_store) == 10

    replaced = _upload(client, CSV_TEXT, mode="replace").get_json()
    assert replaced["removed"] == 10
    assert len(seeded_store) == 2
    assert [record.id for record in seeded_store.list_records()] == [11, 12]


def test_import_rejects_unknown_mode(client, store):
    response = _upload(client, CSV_TEXT, mode="append")

    assert response.status_code == 400


def test_import_reports_row_errors_but_keeps_valid_rows(client, store):
    text = CSV_TEXT + "No Email,,Physics,B,2023-09-02\n"

    data = _upload(client, text).get_json()

    assert data["importedCount"] == 2
    assert data["errors"] == [{"row": 3, "field": "email", "message": "Row 3: Missing email"}]


def test_import_raw_body_with_bom(client, store):
    response = client.post(
        "/api/students/import?mode=merge",
        data=b"\xef\xbb\xbf" + CSV_TEXT.encode("utf-8"),
        content_type="text/csv",
    )

    assert response.status_code == 200
    assert response.get_json()["importedCount"] == 2


def test_import_rejects_non_csv_upload(client, store):
    response = _upload(client, CSV_TEXT, filename="students.xlsx")

    assert response.status_code == 400
    assert len(store) == 0


def test_import_rejects_empty_file(client, store):
    response = _upload(client, "")

    assert response.status_code == 400


def test_import_preview_does_not_modify_collection(client, seeded_store):
    response = client.post(
        "/api/students/import/preview",
        data=(CSV_TEXT + "Broken,,,\n").encode("utf-8"),
        content_type="text/csv",
    )

    data = response.get_json()
    assert response.status_code == 200
    assert len(data["valid"]) == 2
    assert len(data["errors"]) == 2
    assert data["existing"] == 8
    assert len(seeded_store) == 8


def test_export_returns_csv_attachment(client, seeded_store):
    response = client.get("/api/students/export")

    assert response.status_code == 200
    assert response.mimetype == "text/csv"
    expected_name = f"student_data_{date.today().isoformat()}.csv"
    assert response.headers["Content-Disposition"] == f"attachment; filename={expected_name}"

    decoded = decode_csv(response.get_data(as_text=True))
    assert decoded.headers == ("name", "email", "course", "grade", "enrollmentDate")
    assert len(decoded.rows) == 8
    assert decoded.rows[0]["name"] == "John Doe"


def test_export_honours_filters(client, seeded_store):
    response = client.get("/api/students/export?course=Physics")

    decoded = decode_csv(response.get_data(as_text=True))
    assert [row["name"] for row in decoded.rows] == ["Robert Johnson", "Sarah Brown"]
