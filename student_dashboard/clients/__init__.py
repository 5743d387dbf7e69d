"""Clients for the student service boundary."""

from .student_transport import (
    HttpStudentTransport,
    StoreStudentTransport,
    StudentTransport,
    TransportCollection,
)

__all__ = [
    "HttpStudentTransport",
    "StoreStudentTransport",
    "StudentTransport",
    "TransportCollection",
]
