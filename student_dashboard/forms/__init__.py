# student_dashboard/forms/__init__.py
"""
WTForms package
"""

from .student import AttendanceForm, CredentialsForm, NoteForm, StudentForm, StudentUpdateForm

__all__ = [
    "StudentForm",
    "StudentUpdateForm",
    "NoteForm",
    "AttendanceForm",
    "CredentialsForm",
]
