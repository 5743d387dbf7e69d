# config/validation.py

"""
Environment variable validation for the student dashboard.
Validates required environment variables at startup.
"""

import os
import sys
from typing import List, Tuple
from urllib.parse import urlparse


def _is_positive_number(value: str, *, integer: bool) -> bool:
    try:
        number = int(value) if integer else float(value)
    except ValueError:
        return False
    return number > 0


def validate_environment(flask_env: str = None) -> Tuple[bool, List[str]]:
    """
    Validate required environment variables.

    Args:
        flask_env: Flask environment (development, production, testing)
                  If None, reads from FLASK_ENV environment variable

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if flask_env is None:
        flask_env = os.environ.get("FLASK_ENV", "development")

    errors = []

    # Only validate in production
    if flask_env != "production":
        return True, []

    secret_key = os.environ.get("SECRET_KEY", "")
    if not secret_key or secret_key in {"your-secret-key", "your_secret_key"}:
        errors.append(
            "SECRET_KEY is required in production and must not be the default value. "
            'Generate a secure key: python -c "import secrets; print(secrets.token_hex(32))"'
        )

    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        errors.append(
            "DATABASE_URL is required in production. "
            "Set it to your PostgreSQL connection string."
        )

    api_url = os.environ.get("STUDENTS_API_URL")
    if api_url:
        parsed = urlparse(api_url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            errors.append("STUDENTS_API_URL must be an absolute http(s) URL")

    timeout = os.environ.get("STUDENTS_API_TIMEOUT_SECONDS")
    if timeout and not _is_positive_number(timeout, integer=False):
        errors.append("STUDENTS_API_TIMEOUT_SECONDS must be a positive number")

    for name in ("STUDENTS_IMPORT_MAX_UPLOAD_MB", "NOTIFICATION_HISTORY_LIMIT"):
        value = os.environ.get(name)
        if value and not _is_positive_number(value, integer=True):
            errors.append(f"{name} must be a positive integer")

    avatar_template = os.environ.get("STUDENTS_AVATAR_PLACEHOLDER_URL")
    if avatar_template and "{name}" not in avatar_template:
        errors.append("STUDENTS_AVATAR_PLACEHOLDER_URL must contain a {name} placeholder")

    is_valid = len(errors) == 0
    return is_valid, errors


def validate_and_exit(flask_env: str = None) -> None:
    """
    Validate environment variables and exit with error if validation fails.
    Intended to be called at application startup.

    Args:
        flask_env: Flask environment (development, production, testing)
    """
    is_valid, errors = validate_environment(flask_env)

    if not is_valid:
        print("=" * 80, file=sys.stderr)
        print("ENVIRONMENT VALIDATION FAILED", file=sys.stderr)
        print("=" * 80, file=sys.stderr)
        print("\nThe following environment variables are missing or invalid:\n", file=sys.stderr)

        for i, error in enumerate(errors, 1):
            print(f"{i}. {error}", file=sys.stderr)

        print("\n" + "=" * 80, file=sys.stderr)
        print("Please check your .env file or environment variables.", file=sys.stderr)
        print("=" * 80, file=sys.stderr)

        sys.exit(1)
