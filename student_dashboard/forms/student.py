# student_dashboard/forms/student.py
"""
Forms for student management
"""

from flask_wtf import FlaskForm
from wtforms import BooleanField, DateField, SelectField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Email, Length, Optional

from student_dashboard.records.types import (
    ATTENDANCE_STATUSES,
    GRADE_PLACEHOLDER,
    GRADES,
    NOTE_CATEGORIES,
)

GRADE_CHOICES = [(grade, grade) for grade in GRADES] + [(GRADE_PLACEHOLDER, GRADE_PLACEHOLDER)]


class StudentForm(FlaskForm):
    """Form for creating new students"""

    name = StringField(
        "Name",
        validators=[
            DataRequired(message="Name is required"),
            Length(max=200, message="Name must be less than 200 characters."),
        ],
    )
    email = StringField(
        "Email",
        validators=[
            DataRequired(message="Email is required"),
            Email(message="Invalid email address"),
            Length(max=255, message="Email must be less than 255 characters."),
        ],
    )
    course = StringField(
        "Course",
        validators=[
            DataRequired(message="Course is required"),
            Length(max=200, message="Course must be less than 200 characters."),
        ],
    )
    grade = SelectField(
        "Grade",
        validators=[Optional()],
        choices=GRADE_CHOICES,
    )
    enrollmentDate = DateField("Enrollment Date", validators=[Optional()])
    avatar = StringField("Avatar", validators=[Optional()])


class StudentUpdateForm(FlaskForm):
    """Form for partial student updates; absent fields are left alone"""

    name = StringField("Name", validators=[Optional(), Length(max=200)])
    email = StringField("Email", validators=[Optional(), Email(message="Invalid email address"), Length(max=255)])
    course = StringField("Course", validators=[Optional(), Length(max=200)])
    grade = StringField(
        "Grade",
        validators=[
            Optional(),
            AnyOf([choice for choice, _ in GRADE_CHOICES], message="Unknown grade"),
        ],
    )
    enrollmentDate = DateField("Enrollment Date", validators=[Optional()])
    avatar = StringField("Avatar", validators=[Optional()])


class NoteForm(FlaskForm):
    """Form for adding or editing a student note"""

    content = TextAreaField(
        "Note",
        validators=[
            DataRequired(message="Note content is required"),
            Length(max=5000, message="Note must be less than 5000 characters."),
        ],
    )
    category = SelectField(
        "Category",
        choices=[(category, category.title()) for category in NOTE_CATEGORIES],
        default="general",
    )
    important = BooleanField("Important", default=False)


class AttendanceForm(FlaskForm):
    """Form for marking attendance on a day"""

    date = DateField("Date", validators=[DataRequired(message="Date is required")])
    status = SelectField(
        "Status",
        validators=[DataRequired(message="Status is required")],
        choices=[(status, status.title()) for status in ATTENDANCE_STATUSES],
    )


class CredentialsForm(FlaskForm):
    """Form for mock sign-up and sign-in"""

    email = StringField(
        "Email",
        validators=[DataRequired(message="Email is required"), Email(message="Invalid email address")],
    )
    password = StringField(
        "Password",
        validators=[
            DataRequired(message="Password is required"),
            Length(min=6, message="Password must be at least 6 characters."),
        ],
    )
