"""
Student transport capability.

The four CRUD calls of the ``/api/students`` endpoints, with an in-process
implementation backed by a ``StudentStore`` and an HTTP implementation built
on ``requests``. ``TransportCollection`` lets the import reconciler write
through any transport.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

import requests

from student_dashboard.records.errors import RecordValidationError, StudentNotFoundError, TransportError
from student_dashboard.records.store import StudentStore
from student_dashboard.records.types import StudentDraft, StudentRecord

DEFAULT_TIMEOUT_SECONDS = 10.0


class StudentTransport(Protocol):
    def list_students(self) -> list[StudentRecord]: ...

    def get_student(self, student_id: int) -> StudentRecord: ...

    def create_student(self, draft: StudentDraft) -> StudentRecord: ...

    def delete_student(self, student_id: int) -> StudentRecord: ...


class StoreStudentTransport:
    """In-process transport that talks to a store directly."""

    def __init__(self, store: StudentStore) -> None:
        self.store = store

    def list_students(self) -> list[StudentRecord]:
        return self.store.list_records()

    def get_student(self, student_id: int) -> StudentRecord:
        return self.store.get(student_id)

    def create_student(self, draft: StudentDraft) -> StudentRecord:
        return self.store.add(draft)

    def delete_student(self, student_id: int) -> StudentRecord:
        return self.store.remove(student_id)


def _draft_payload(draft: StudentDraft) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": draft.name,
        "email": draft.email,
        "course": draft.course,
        "grade": draft.grade,
        "enrollmentDate": draft.enrollment_date,
        "avatar": draft.avatar,
    }
    return {key: value for key, value in payload.items() if value is not None}


class HttpStudentTransport:
    """Talk to a remote ``/api/students`` service over HTTP."""

    def __init__(
        self,
        base_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        logger: logging.Logger | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def list_students(self) -> list[StudentRecord]:
        payload = self._request("GET", "/api/students")
        return [self._parse_record(item) for item in payload.get("students", [])]

    def get_student(self, student_id: int) -> StudentRecord:
        payload = self._request("GET", f"/api/students/{student_id}", student_id=student_id)
        return self._parse_record(payload.get("student"))

    def create_student(self, draft: StudentDraft) -> StudentRecord:
        payload = self._request("POST", "/api/students", json=_draft_payload(draft))
        return self._parse_record(payload.get("student"))

    def delete_student(self, student_id: int) -> StudentRecord:
        payload = self._request("DELETE", f"/api/students/{student_id}", student_id=student_id)
        return self._parse_record(payload.get("student"))

    # Internal helpers -----------------------------------------------------------

    def _request(self, method: str, path: str, *, student_id: int | None = None, **kwargs) -> Mapping[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            self.logger.error("Student API %s %s failed: %s", method, url, exc)
            raise TransportError(f"Could not reach the student service: {exc}") from exc

        if response.status_code == 404 and student_id is not None:
            raise StudentNotFoundError(student_id)
        if response.status_code == 400:
            raise RecordValidationError(self._error_message(response))
        if not response.ok:
            message = self._error_message(response)
            self.logger.error("Student API %s %s returned %s: %s", method, url, response.status_code, message)
            raise TransportError(f"Student service responded with {response.status_code}: {message}")

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError("Student service returned a non-JSON response.") from exc

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text
        if isinstance(data, Mapping):
            return str(data.get("message") or data.get("error") or data)
        return str(data)

    @staticmethod
    def _parse_record(data: Any) -> StudentRecord:
        if not isinstance(data, Mapping):
            raise TransportError("Student service returned an unexpected payload.")
        try:
            return StudentRecord.from_mapping(data)
        except ValueError as exc:
            raise TransportError(f"Student service returned an invalid record: {exc}") from exc


class TransportCollection:
    """Adapt a ``StudentTransport`` to the collection interface of the reconciler."""

    def __init__(self, transport: StudentTransport) -> None:
        self.transport = transport

    def list_records(self) -> list[StudentRecord]:
        return self.transport.list_students()

    def add(self, draft: StudentDraft) -> StudentRecord:
        return self.transport.create_student(draft)

    def clear(self) -> None:
        for record in self.transport.list_students():
            self.transport.delete_student(record.id)
