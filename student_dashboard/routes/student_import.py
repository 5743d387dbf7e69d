# student_dashboard/routes/student_import.py
"""
CSV import and export routes
"""

from flask import Response, current_app, jsonify, request

from student_dashboard.records import FilterSpec, ImportMode, apply_filters, decode_csv, validate_rows
from student_dashboard.records.errors import CSVParseError
from student_dashboard.records.reconcile import export_csv, export_filename, import_csv
from student_dashboard.records.types import DEFAULT_AVATAR_TEMPLATE
from student_dashboard.utils.app_services import get_student_store
from student_dashboard.utils.uploads import decode_upload, read_upload


def _uploaded_text():
    """CSV text from a multipart ``file`` field or, failing that, the raw request body"""
    upload = request.files.get("file")
    if upload is not None and upload.filename:
        return read_upload(upload)
    if request.files or request.form:
        raise CSVParseError("No file provided.")
    text = decode_upload(request.get_data())
    if not text.strip():
        raise CSVParseError("No CSV content provided.")
    return text


def _avatar_template():
    return current_app.config.get("STUDENTS_AVATAR_PLACEHOLDER_URL", DEFAULT_AVATAR_TEMPLATE)


def register_import_routes(app):
    """Register CSV import/export routes"""

    @app.route("/api/students/import", methods=["POST"])
    def api_import_students():
        """
        Import students from CSV.

        ``mode`` (form field or query arg) chooses ``merge`` or ``replace``.
        Importing into a non-empty collection without a mode answers 409 with
        the existing and incoming counts so the caller can ask the user.
        """
        try:
            mode = ImportMode.coerce(request.values.get("mode"))
        except ValueError as e:
            return jsonify({"message": str(e)}), 400

        text = _uploaded_text()
        report = import_csv(get_student_store(), text, mode, avatar_template=_avatar_template())
        current_app.logger.info(
            f"CSV import finished: {report.summary.imported_count} imported, "
            f"{len(report.errors)} row errors, mode={report.summary.mode.value}"
        )

        payload = report.to_dict()
        payload["message"] = f"Successfully imported {report.summary.imported_count} students"
        return jsonify(payload)

    @app.route("/api/students/import/preview", methods=["POST"])
    def api_preview_import():
        """Validate CSV without touching the collection."""
        text = _uploaded_text()
        decoded = decode_csv(text)
        validation = validate_rows(decoded.rows, avatar_template=_avatar_template())
        return jsonify(
            {
                "headers": list(decoded.headers),
                "valid": [
                    {
                        "name": draft.name,
                        "email": draft.email,
                        "course": draft.course,
                        "grade": draft.grade,
                        "enrollmentDate": draft.enrollment_date,
                        "avatar": draft.avatar,
                    }
                    for draft in validation.normalized
                ],
                "errors": [error.to_dict() for error in validation.errors],
                "diagnostics": list(decoded.diagnostics),
                "existing": len(get_student_store()),
            }
        )

    @app.route("/api/students/export", methods=["GET"])
    def api_export_students():
        """Download the (optionally filtered) students as CSV."""
        try:
            spec = FilterSpec.from_query_args(request.args)
        except ValueError as e:
            return jsonify({"message": str(e)}), 400

        students = apply_filters(get_student_store().list_records(), spec)
        filename = export_filename()
        current_app.logger.info(f"Exporting {len(students)} students to {filename}")
        return Response(
            export_csv(students),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
