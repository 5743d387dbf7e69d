# conftest.py

import os

import pytest

# Set testing environment BEFORE importing app so app.py uses TestingConfig
os.environ["FLASK_ENV"] = "testing"

from app import app as flask_app  # noqa: E402
from student_dashboard.models import db  # noqa: E402
from student_dashboard.records import StudentStore  # noqa: E402
from student_dashboard.records.seed import SAMPLE_STUDENTS  # noqa: E402
from student_dashboard.utils.app_services import build_student_store, init_app_services  # noqa: E402
from student_dashboard.utils.logging_config import setup_logging  # noqa: E402


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application"""
    flask_app.config.update(
        {
            "TESTING": True,
            "WTF_CSRF_ENABLED": False,
            "SECRET_KEY": "test-secret-key-for-testing-only",
            "ENABLE_FILE_LOGGING": False,
            "ENABLE_CONSOLE_LOGGING": False,
            "LOG_LEVEL": "DEBUG",
            "STUDENTS_SEED_SAMPLE_DATA": False,
            "NOTIFICATION_HISTORY_LIMIT": 100,
        }
    )
    setup_logging(flask_app)

    with flask_app.app_context():
        db.drop_all()
        db.create_all()
        init_app_services(flask_app, store=build_student_store(flask_app, ()))
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    """Create a test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


@pytest.fixture
def store(app) -> StudentStore:
    """The app's (empty) student store"""
    return app.extensions["student_dashboard"]["store"]


@pytest.fixture
def seeded_store(store) -> StudentStore:
    """The app's student store loaded with the eight sample students"""
    store.replace_all(SAMPLE_STUDENTS)
    return store


@pytest.fixture
def logged_in_client(client):
    """Test client with a registered, signed-in user"""
    response = client.post(
        "/api/auth/register",
        json={"email": "teacher@example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    return client
