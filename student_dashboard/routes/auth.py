# student_dashboard/routes/auth.py
"""
Mock authentication routes
"""

from flask import current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from student_dashboard.forms import CredentialsForm
from student_dashboard.utils.app_services import get_auth_service

from .students import form_errors_response, invalid_body_response, json_body, non_text_fields, type_errors_response


def _credentials_form():
    data = json_body()
    if data is None:
        return None, invalid_body_response()
    wrong_types = non_text_fields(data, ("email", "password"))
    if wrong_types:
        return None, type_errors_response(wrong_types)
    form = CredentialsForm(meta={"csrf": False})
    if not form.validate():
        return None, form_errors_response(form)
    return form, None


def register_auth_routes(app):
    """Register authentication routes"""

    @app.route("/api/auth/register", methods=["POST"])
    def api_register():
        form, error_response = _credentials_form()
        if error_response is not None:
            return error_response

        user = get_auth_service().register(form.email.data, form.password.data)
        login_user(user)
        return jsonify({"user": user.to_dict(), "message": "Account created successfully"}), 201

    @app.route("/api/auth/login", methods=["POST"])
    def api_login():
        form, error_response = _credentials_form()
        if error_response is not None:
            return error_response

        user = get_auth_service().authenticate(form.email.data, form.password.data)
        login_user(user)
        current_app.logger.info(f"User {user.uid} logged in")
        return jsonify({"user": user.to_dict(), "message": "Logged in successfully"})

    @app.route("/api/auth/logout", methods=["POST"])
    @login_required
    def api_logout():
        uid = current_user.get_id()
        logout_user()
        current_app.logger.info(f"User {uid} logged out")
        return jsonify({"message": "Logged out successfully"})

    @app.route("/api/auth/me", methods=["GET"])
    @login_required
    def api_current_user():
        return jsonify({"user": current_user.to_dict()})
