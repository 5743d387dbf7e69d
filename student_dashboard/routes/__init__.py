# student_dashboard/routes/__init__.py
"""
Application routes package
"""

from .auth import register_auth_routes
from .notifications import register_notification_routes
from .student_import import register_import_routes
from .students import register_student_routes


def init_routes(app):
    """Initialize all application routes"""
    register_import_routes(app)
    register_student_routes(app)
    register_notification_routes(app)
    register_auth_routes(app)

    @app.route("/health")
    def health():
        return {"status": "ok"}
