# student_dashboard/routes/notifications.py
"""
Notification history and preference routes
"""

from flask import current_app, jsonify, request
from flask_login import current_user, login_required

from student_dashboard.utils.app_services import get_notification_service

from .students import invalid_body_response, json_body


def register_notification_routes(app):
    """Register notification API routes"""

    @app.route("/api/notifications", methods=["GET"])
    def api_list_notifications():
        service = get_notification_service()
        history = service.get_history()
        return jsonify(
            {
                "notifications": history,
                "unreadCount": sum(1 for item in history if not item.get("read")),
            }
        )

    @app.route("/api/notifications", methods=["POST"])
    def api_add_notification():
        data = json_body()
        if data is None:
            return invalid_body_response()
        try:
            notification = get_notification_service().add_notification(
                data.get("type"), data.get("title"), data.get("message")
            )
        except ValueError as e:
            return jsonify({"message": str(e)}), 400
        return jsonify({"notification": notification, "message": "Notification added"}), 201

    @app.route("/api/notifications", methods=["DELETE"])
    def api_clear_notifications():
        get_notification_service().clear_notifications()
        current_app.logger.info("Notification history cleared")
        return jsonify({"message": "Notifications cleared"})

    @app.route("/api/notifications/<notification_id>/read", methods=["POST"])
    def api_mark_notification_read(notification_id):
        notification = get_notification_service().mark_as_read(notification_id)
        return jsonify({"notification": notification, "message": "Notification marked as read"})

    @app.route("/api/notifications/read-all", methods=["POST"])
    def api_mark_all_notifications_read():
        updated = get_notification_service().mark_all_as_read()
        return jsonify({"updated": updated, "message": "All notifications marked as read"})

    @app.route("/api/notifications/<notification_id>", methods=["DELETE"])
    def api_delete_notification(notification_id):
        get_notification_service().delete_notification(notification_id)
        return jsonify({"message": "Notification deleted"})

    @app.route("/api/notifications/preferences", methods=["GET"])
    @login_required
    def api_get_notification_preferences():
        preferences = get_notification_service().get_preferences(current_user.get_id())
        return jsonify({"preferences": preferences})

    @app.route("/api/notifications/preferences", methods=["PUT"])
    @login_required
    def api_save_notification_preferences():
        data = json_body()
        if data is None:
            return invalid_body_response()
        try:
            preferences = get_notification_service().save_preferences(current_user.get_id(), data)
        except ValueError as e:
            return jsonify({"message": str(e)}), 400
        current_app.logger.info(f"Saved notification preferences for user {current_user.get_id()}")
        return jsonify({"preferences": preferences, "message": "Preferences saved"})

    @app.route("/api/notifications/email", methods=["POST"])
    @login_required
    def api_send_notification_email():
        """Compose (mock) emails for recipients who have the notification type enabled."""
        data = json_body()
        if data is None:
            return invalid_body_response()

        service = get_notification_service()
        notification_type = data.get("type")
        recipients = data.get("recipients") or []
        if not isinstance(notification_type, str):
            return jsonify({"message": "type must be a string"}), 400
        if not isinstance(recipients, list) or not all(isinstance(item, dict) for item in recipients):
            return jsonify({"message": "recipients must be a list of objects"}), 400
        common_data = data.get("data") or {}
        if not isinstance(common_data, dict) or not all(
            isinstance(item.get("data") or {}, dict) for item in recipients
        ):
            return jsonify({"message": "data must be an object"}), 400
        if not service.is_enabled(current_user.get_id(), notification_type):
            return jsonify({"results": [], "message": "Notification type is disabled"})

        results = service.send_batch(recipients, notification_type, common_data)
        return jsonify({"results": results, "message": f"Processed {len(results)} emails"})
