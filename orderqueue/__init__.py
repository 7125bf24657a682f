from flask import Flask, jsonify
from flask_cors import CORS

from orderqueue.api import api_bp
from orderqueue.auth.routes import auth_bp
from orderqueue.config import Config, get_config
from orderqueue.db_config import configure_database
from orderqueue.logging_config import configure_logging, get_logger
from orderqueue.models import db
from orderqueue.queue_lock import queue_lock_manager

# Configure logging
logger = configure_logging(log_level=Config.LOG_LEVEL, log_file=Config.LOG_FILE)


def create_app(config_overrides=None):
    """
    Build the Flask application.

    Args:
        config_overrides: Optional mapping applied after the environment config
                          and before extensions are initialised (tests pass an
                          in-memory database URI here)
    """
    # Get the appropriate config class based on environment
    config_class = get_config()

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Configure database separately
    configure_database(app)

    if config_overrides:
        app.config.update(config_overrides)

    logger.info(f"Starting application in {app.config.get('ENV')} environment")
    logger.info(f"Database URI: {app.config.get('SQLALCHEMY_DATABASE_URI', 'Not set')[:50]}...")

    queue_lock_manager.set_timeout(app.config.get("QUEUE_LOCK_TIMEOUT_SECONDS", 60))

    # Get allowed origins from environment variable
    allowed_origins = app.config.get("CORS_ORIGINS", "*")
    if allowed_origins != "*":
        # Parse comma-separated list if provided
        allowed_origins = [origin.strip() for origin in allowed_origins.split(",")]

    CORS(app,
         resources={r"/*": {"origins": allowed_origins}},
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"])

    db.init_app(app)

    # Only create tables if they don't exist
    with app.app_context():
        db.create_all()

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(auth_bp)

    @app.route("/health")
    def health():
        """Liveness check with the current queue lock state."""
        return jsonify({
            "status": "ok",
            "environment": app.config.get("ENV"),
            "queue_lock": queue_lock_manager.get_status(),
        }), 200

    return app
