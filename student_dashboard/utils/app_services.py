# student_dashboard/utils/app_services.py
"""
App-bound service registry.

Each Flask app owns one student store and one set of key-value backed
services, kept in ``app.extensions``. Routes and CLI commands reach them
through the getters below instead of module globals.
"""

from flask import current_app

from student_dashboard.records import StudentStore
from student_dashboard.records.seed import SAMPLE_STUDENTS
from student_dashboard.records.types import DEFAULT_AVATAR_TEMPLATE
from student_dashboard.services import MockAuthService, NotificationService, SqlKeyValueStore

EXTENSION_KEY = "student_dashboard"


def build_student_store(app, records=None):
    """Create a store configured from ``app.config``, seeded with sample data when enabled"""
    if records is None:
        records = SAMPLE_STUDENTS if app.config.get("STUDENTS_SEED_SAMPLE_DATA", False) else ()
    return StudentStore(
        records,
        avatar_template=app.config.get("STUDENTS_AVATAR_PLACEHOLDER_URL", DEFAULT_AVATAR_TEMPLATE),
    )


def init_app_services(app, *, store=None, kv_store=None):
    """Register the store and services on ``app``; returns the registry dict"""
    kv_store = kv_store if kv_store is not None else SqlKeyValueStore()
    registry = {
        "store": store if store is not None else build_student_store(app),
        "kv_store": kv_store,
        "notifications": NotificationService(
            kv_store, history_limit=app.config.get("NOTIFICATION_HISTORY_LIMIT")
        ),
        "auth": MockAuthService(kv_store),
    }
    app.extensions[EXTENSION_KEY] = registry
    app.logger.info(f"Student store ready with {len(registry['store'])} records")
    return registry


def _registry(app=None):
    app = app or current_app
    return app.extensions[EXTENSION_KEY]


def get_student_store(app=None) -> StudentStore:
    return _registry(app)["store"]


def get_notification_service(app=None) -> NotificationService:
    return _registry(app)["notifications"]


def get_auth_service(app=None) -> MockAuthService:
    return _registry(app)["auth"]
