# app.py

import os

from dotenv import load_dotenv
from flask import Flask, current_app, jsonify
from flask_login import LoginManager
from sqlalchemy.exc import SQLAlchemyError

# Load environment variables from .env file first
load_dotenv()

# Module imports after load_dotenv() - E402 is intentional
from config import (  # noqa: E402
    DevelopmentConfig,
    DevelopmentLoggingConfig,
    ProductionConfig,
    ProductionLoggingConfig,
    TestingConfig,
    TestingLoggingConfig,
)
from config.validation import validate_and_exit  # noqa: E402
from student_dashboard.cli import students_cli  # noqa: E402
from student_dashboard.models import db  # noqa: E402
from student_dashboard.records.errors import TransportError  # noqa: E402
from student_dashboard.routes import init_routes  # noqa: E402
from student_dashboard.utils.app_services import get_auth_service, init_app_services  # noqa: E402
from student_dashboard.utils.error_handler import register_error_handlers  # noqa: E402
from student_dashboard.utils.logging_config import setup_logging  # noqa: E402

app = Flask(__name__)

# Validate environment variables (only in production)
flask_env = os.environ.get("FLASK_ENV", "development")
if flask_env == "production":
    validate_and_exit(flask_env)

# Load configuration based on the environment
if flask_env == "production":
    app.config.from_object(ProductionConfig)
    app.config.from_object(ProductionLoggingConfig)
elif flask_env == "testing":
    app.config.from_object(TestingConfig)
    app.config.from_object(TestingLoggingConfig)
else:
    app.config.from_object(DevelopmentConfig)
    app.config.from_object(DevelopmentLoggingConfig)

# Initialize extensions
db.init_app(app)
login_manager = LoginManager()
login_manager.init_app(app)

# Initialize logging before anything logs
setup_logging(app)

with app.app_context():
    # Create the database tables only if not in testing mode
    if not app.config.get("TESTING", False):
        db.create_all()
    init_app_services(app)


# User loader callback for Flask-Login
@login_manager.user_loader
def load_user(user_id):
    try:
        return get_auth_service().get_user(user_id)
    except (TransportError, SQLAlchemyError) as e:
        current_app.logger.error(f"Error loading user {user_id}: {str(e)}")
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"message": "Authentication required"}), 401


# Initialize routes, error handlers and CLI commands
init_routes(app)
register_error_handlers(app)
app.cli.add_command(students_cli)


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(host="0.0.0.0", port=port)
