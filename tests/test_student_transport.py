from __future__ import annotations

import pytest
import requests

from student_dashboard.clients import HttpStudentTransport, StoreStudentTransport, TransportCollection
from student_dashboard.clients.student_transport import DEFAULT_TIMEOUT_SECONDS
from student_dashboard.records import (
    ImportMode,
    RecordValidationError,
    StudentDraft,
    StudentNotFoundError,
    StudentStore,
    TransportError,
    reconcile,
)
from student_dashboard.records.seed import SAMPLE_STUDENTS


class FakeResponse:
    def __init__(self, *, status_code=200, json_data=None, text: str = ""):
        self.status_code = status_code
        self._json_data = json_data
        self.text = text
        self.ok = status_code < 400

    def json(self):
        if self._json_data is None:
            raise ValueError("No JSON object could be decoded")
        return self._json_data


class FakeSession:
    def __init__(self, responses=None, exc: Exception | None = None):
        self.responses = list(responses or [])
        self.exc = exc
        self.calls = []

    def request(self, method, url, timeout=None, **kwargs):
        self.calls.append((method, url, timeout, kwargs))
        if self.exc is not None:
            raise self.exc
        return self.responses.pop(0)


def _student_payload(student_id=1, name="Ada Lovelace"):
    return {
        "id": student_id,
        "name": name,
        "email": "ada@example.com",
        "course": "Mathematics",
        "grade": "A",
        "enrollmentDate": "2023-09-01",
        "avatar": "https://example.com/ada.png",
    }


def test_list_students_parses_records():
    session = FakeSession([FakeResponse(json_data={"students": [_student_payload()], "message": "ok"})])
    transport = HttpStudentTransport("http://api.example.com/", session=session, timeout=3)

    students = transport.list_students()

    assert students[0].name == "Ada Lovelace"
    assert session.calls == [("GET", "http://api.example.com/api/students", 3, {})]


def test_create_student_posts_wire_payload():
    session = FakeSession([FakeResponse(status_code=201, json_data={"student": _student_payload(5)})])
    transport = HttpStudentTransport("http://api.example.com", session=session)

    created = transport.create_student(StudentDraft(name="Ada Lovelace", email="ada@example.com", course="Mathematics"))

    assert created.id == 5
    method, url, _, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://api.example.com/api/students")
    assert kwargs["json"] == {"name": "Ada Lovelace", "email": "ada@example.com", "course": "Mathematics"}


def test_missing_student_maps_to_not_found():
    session = FakeSession([FakeResponse(status_code=404, json_data={"message": "Student with ID 7 not found"})])
    transport = HttpStudentTransport("http://api.example.com", session=session)

    with pytest.raises(StudentNotFoundError):
        transport.get_student(7)


def test_bad_request_maps_to_validation_error():
    session = FakeSession([FakeResponse(status_code=400, json_data={"message": "Validation failed"})])
    transport = HttpStudentTransport("http://api.example.com", session=session)

    with pytest.raises(RecordValidationError, match="Validation failed"):
        transport.create_student(StudentDraft(name="", email="", course=""))


def test_server_error_maps_to_transport_error():
    session = FakeSession([FakeResponse(status_code=500, text="boom")])
    transport = HttpStudentTransport("http://api.example.com", session=session)

    with pytest.raises(TransportError, match="500"):
        transport.list_students()


def test_connection_failure_maps_to_transport_error():
    session = FakeSession(exc=requests.ConnectionError("refused"))
    transport = HttpStudentTransport("http://api.example.com", session=session)

    with pytest.raises(TransportError):
        transport.list_students()


def test_timeout_maps_to_transport_error():
    session = FakeSession(exc=requests.Timeout("slow"))
    transport = HttpStudentTransport("http://api.example.com", session=session)

    with pytest.raises(TransportError):
        transport.delete_student(1)


def test_non_json_body_maps_to_transport_error():
    session = FakeSession([FakeResponse(status_code=200, text="<html>")])
    transport = HttpStudentTransport("http://api.example.com", session=session)

    with pytest.raises(TransportError):
        transport.list_students()


def test_invalid_record_payload_maps_to_transport_error():
    session = FakeSession([FakeResponse(json_data={"student": {"id": "abc"}})])
    transport = HttpStudentTransport("http://api.example.com", session=session)

    with pytest.raises(TransportError):
        transport.get_student(1)


def test_store_transport_and_collection_reconcile_through_transport():
    store = StudentStore(SAMPLE_STUDENTS)
    collection = TransportCollection(StoreStudentTransport(store))

    summary = reconcile(
        collection,
        [StudentDraft(name="Ada", email="ada@example.com", course="Maths", grade="A", enrollment_date="2024-01-01")],
        ImportMode.REPLACE,
    )

    assert summary.removed == 8
    assert [record.name for record in store.list_records()] == ["Ada"]


def test_default_timeout_is_applied_to_requests():
    session = FakeSession([FakeResponse(json_data={"students": []})])
    transport = HttpStudentTransport("http://api.example.com", session=session)

    transport.list_students()

    assert session.calls[0][2] == DEFAULT_TIMEOUT_SECONDS
