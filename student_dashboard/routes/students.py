# student_dashboard/routes/students.py
"""
Student API routes: CRUD, filtering, performance, attendance and notes
"""

from flask import current_app, jsonify, request

from student_dashboard.forms import AttendanceForm, NoteForm, StudentForm, StudentUpdateForm
from student_dashboard.records import FilterSpec, apply_filters
from student_dashboard.records.performance import summarize_performance
from student_dashboard.utils.app_services import get_student_store

NOTE_FIELDS = ("content", "category", "important")
STUDENT_TEXT_FIELDS = ("name", "email", "course", "grade", "enrollmentDate", "avatar")
ATTENDANCE_TEXT_FIELDS = ("date", "status")
NOTE_TEXT_FIELDS = ("content", "category")


def json_body():
    """Return the request JSON object, or None when the body is not a JSON object"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def invalid_body_response():
    return jsonify({"message": "Request body must be a JSON object"}), 400


def form_errors_response(form):
    return jsonify({"message": "Validation failed", "errors": form.errors}), 400


def non_text_fields(data, fields):
    """Names of `fields` present in `data` with a value that is not a string"""
    return [field for field in fields if data.get(field) is not None and not isinstance(data[field], str)]


def type_errors_response(fields):
    return jsonify({"message": "Validation failed", "errors": {field: ["Must be a string."] for field in fields}}), 400


def register_student_routes(app):
    """Register student API routes"""

    @app.route("/api/students", methods=["GET"])
    def api_list_students():
        """List students, optionally filtered and sorted by query parameters."""
        try:
            spec = FilterSpec.from_query_args(request.args)
        except ValueError as e:
            return jsonify({"message": str(e)}), 400

        students = apply_filters(get_student_store().list_records(), spec)
        current_app.logger.debug(f"Listing {len(students)} students for {spec}")
        return jsonify(
            {
                "students": [student.to_dict() for student in students],
                "message": "Students retrieved successfully",
            }
        )

    @app.route("/api/students/<int:student_id>", methods=["GET"])
    def api_get_student(student_id):
        student = get_student_store().get(student_id)
        return jsonify({"student": student.to_dict(), "message": "Student retrieved successfully"})

    @app.route("/api/students", methods=["POST"])
    def api_create_student():
        """Create a student from a JSON body."""
        data = json_body()
        if data is None:
            return invalid_body_response()

        wrong_types = non_text_fields(data, STUDENT_TEXT_FIELDS)
        if wrong_types:
            return type_errors_response(wrong_types)

        form = StudentForm(meta={"csrf": False})
        if not form.validate():
            return form_errors_response(form)

        student = get_student_store().add(data)
        current_app.logger.info(f"Created student {student.id} ({student.email})")
        return (
            jsonify({"student": student.to_dict(), "message": "Student created successfully"}),
            201,
        )

    @app.route("/api/students/<int:student_id>", methods=["PATCH", "PUT"])
    def api_update_student(student_id):
        """Merge the supplied fields into an existing student."""
        data = json_body()
        if data is None:
            return invalid_body_response()

        wrong_types = non_text_fields(data, STUDENT_TEXT_FIELDS)
        if wrong_types:
            return type_errors_response(wrong_types)

        form = StudentUpdateForm(meta={"csrf": False})
        if not form.validate():
            return form_errors_response(form)

        student = get_student_store().update(student_id, data)
        current_app.logger.info(f"Updated student {student_id}")
        return jsonify({"student": student.to_dict(), "message": "Student updated successfully"})

    @app.route("/api/students/<int:student_id>", methods=["DELETE"])
    def api_delete_student(student_id):
        student = get_student_store().remove(student_id)
        current_app.logger.info(f"Deleted student {student_id}")
        return jsonify({"student": student.to_dict(), "message": "Student deleted successfully"})

    # Performance ----------------------------------------------------------

    @app.route("/api/students/<int:student_id>/performance", methods=["GET"])
    def api_get_performance(student_id):
        student = get_student_store().get(student_id)
        performance = student.performance
        return jsonify(
            {
                "performance": performance.to_dict() if performance else None,
                "summary": summarize_performance(performance).to_dict(),
            }
        )

    @app.route("/api/students/<int:student_id>/performance", methods=["PUT"])
    def api_set_performance(student_id):
        data = json_body()
        if data is None:
            return invalid_body_response()

        student = get_student_store().set_performance(student_id, data)
        return jsonify(
            {
                "student": student.to_dict(),
                "summary": summarize_performance(student.performance).to_dict(),
                "message": "Performance updated successfully",
            }
        )

    @app.route("/api/students/<int:student_id>/attendance", methods=["POST"])
    def api_mark_attendance(student_id):
        """Mark a student present or absent for one day."""
        data = json_body()
        if data is None:
            return invalid_body_response()

        wrong_types = non_text_fields(data, ATTENDANCE_TEXT_FIELDS)
        if wrong_types:
            return type_errors_response(wrong_types)

        form = AttendanceForm(meta={"csrf": False})
        if not form.validate():
            return form_errors_response(form)

        student = get_student_store().mark_attendance(student_id, form.date.data, form.status.data)
        return jsonify(
            {
                "student": student.to_dict(),
                "attendance": student.attendance,
                "message": "Attendance recorded successfully",
            }
        )

    # Notes ----------------------------------------------------------------

    @app.route("/api/students/<int:student_id>/notes", methods=["GET"])
    def api_list_notes(student_id):
        student = get_student_store().get(student_id)
        return jsonify({"notes": [note.to_dict() for note in student.notes or ()]})

    @app.route("/api/students/<int:student_id>/notes", methods=["POST"])
    def api_add_note(student_id):
        data = json_body()
        if data is None:
            return invalid_body_response()

        wrong_types = non_text_fields(data, NOTE_TEXT_FIELDS)
        if wrong_types:
            return type_errors_response(wrong_types)

        form = NoteForm(meta={"csrf": False})
        if not form.validate():
            return form_errors_response(form)

        note = get_student_store().add_note(
            student_id,
            form.content.data,
            category=form.category.data,
            important=form.important.data,
        )
        return jsonify({"note": note.to_dict(), "message": "Note added successfully"}), 201

    @app.route("/api/students/<int:student_id>/notes/<note_id>", methods=["PATCH", "PUT"])
    def api_update_note(student_id, note_id):
        """Edit a note; fields absent from the body keep their value."""
        data = json_body()
        if data is None:
            return invalid_body_response()

        changes = {field: data[field] for field in NOTE_FIELDS if field in data}
        if "important" in changes and not isinstance(changes["important"], bool):
            return jsonify({"message": "important must be true or false"}), 400
        wrong_types = non_text_fields(changes, NOTE_TEXT_FIELDS)
        if wrong_types:
            return type_errors_response(wrong_types)

        note = get_student_store().update_note(student_id, note_id, **changes)
        return jsonify({"note": note.to_dict(), "message": "Note updated successfully"})

    @app.route("/api/students/<int:student_id>/notes/<note_id>", methods=["DELETE"])
    def api_delete_note(student_id, note_id):
        get_student_store().delete_note(student_id, note_id)
        return jsonify({"message": "Note deleted successfully"})
