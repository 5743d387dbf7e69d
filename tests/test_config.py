import logging

import pytest

from config.base import _coerce_bool, _coerce_float, _coerce_int
from config.validation import validate_and_exit, validate_environment
from student_dashboard.utils.logging_config import JsonFormatter, setup_logging


@pytest.mark.parametrize(
    "value,expected",
    [("1", True), ("yes", True), ("OFF", False), ("false", False), ("maybe", None), (None, None)],
)
def test_coerce_bool(value, expected):
    assert _coerce_bool(value, default=None) is expected


def test_coerce_int_and_float():
    assert _coerce_int("25", 5) == 25
    assert _coerce_int("abc", 5) == 5
    assert _coerce_int("0", 5, minimum=1) == 5
    assert _coerce_float("2.5", 10.0) == 2.5
    assert _coerce_float("", 10.0) == 10.0


def test_testing_config_loaded(app):
    assert app.config["TESTING"] is True
    assert app.config["SQLALCHEMY_DATABASE_URI"] == "sqlite:///:memory:"
    assert app.config["MAX_CONTENT_LENGTH"] == app.config["STUDENTS_IMPORT_MAX_UPLOAD_MB"] * 1024 * 1024


def test_validation_skips_non_production():
    assert validate_environment("development") == (True, [])


def test_validation_reports_production_problems(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("STUDENTS_API_URL", "not a url")
    monkeypatch.setenv("STUDENTS_API_TIMEOUT_SECONDS", "-1")
    monkeypatch.setenv("STUDENTS_AVATAR_PLACEHOLDER_URL", "https://example.com/avatar.png")

    is_valid, errors = validate_environment("production")

    assert not is_valid
    joined = "\n".join(errors)
    for name in (
        "SECRET_KEY",
        "DATABASE_URL",
        "STUDENTS_API_URL",
        "STUDENTS_API_TIMEOUT_SECONDS",
        "STUDENTS_AVATAR_PLACEHOLDER_URL",
    ):
        assert name in joined


def test_validate_and_exit_exits_on_failure(monkeypatch):
    monkeypatch.delenv("SECRET_KEY", raising=False)

    with pytest.raises(SystemExit):
        validate_and_exit("production")


def test_json_formatter_renders_single_line():
    record = logging.LogRecord("student_dashboard", logging.INFO, __file__, 1, "Imported %s", (3,), None)

    rendered = JsonFormatter().format(record)

    assert '"message": "Imported 3"' in rendered
    assert "\n" not in rendered


def test_setup_logging_writes_rotating_file(app, tmp_path):
    app.config.update(ENABLE_FILE_LOGGING=True, LOG_DIR=str(tmp_path), LOG_FORMAT="text", LOG_LEVEL="INFO")
    try:
        setup_logging(app)
        logging.getLogger("student_dashboard.records.store").info("hello from the store")
        for handler in logging.getLogger("student_dashboard").handlers:
            handler.flush()
        assert "hello from the store" in (tmp_path / "student_dashboard.log").read_text()
    finally:
        app.config.update(ENABLE_FILE_LOGGING=False)
        setup_logging(app)
