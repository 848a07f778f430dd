import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import Flask

from .config import Config
from .errors import AuthError
from .extensions import db, migrate, login_manager
from .services import init_services
from .services import auth_service

# Blueprints
from .blueprints.errors import errors_bp
from .blueprints.auth import auth_bp
from .blueprints.api import api_bp
from .blueprints.main import main_bp


# error reporting, only when a DSN is configured
def _init_sentry(app):
    dsn = app.config.get("SENTRY_DSN")
    if not dsn:
        return
    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=app.config.get("SENTRY_TRACES_SAMPLE_RATE", 0.0),
        environment=app.config.get("ENV", "development"),
        release=os.getenv("GIT_COMMIT", None),
        send_default_pii=False,
    )
    app.logger.info("sentry reporting enabled (%s)", app.config.get("ENV", "development"))


def _init_logging(app):
    level_name = app.config.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    app.logger.setLevel(level)

    # app.logger is shared by every app built in this process; drop our old handlers
    for handler in list(app.logger.handlers):
        if getattr(handler, "_studydesk", False):
            app.logger.removeHandler(handler)
            handler.close()

    log_dir = Path(app.config.get("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / app.config.get("LOG_FILENAME", "studydesk.log")

    # LOG_JSON switches to one JSON object per line
    if app.config.get("LOG_JSON", False):
        import json_log_formatter
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s")

    # rotated file (five 5 MB files) plus a console copy for containers
    handlers = [
        RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=5, encoding="utf-8"),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler._studydesk = True
        app.logger.addHandler(handler)

    app.logger.info("logging to %s at %s", log_path, level_name)


def _resolve_dirs(app):
    # unset -> instance folder; relative -> working directory
    instance = Path(app.instance_path)
    instance.mkdir(parents=True, exist_ok=True)
    for key, default in (("UPLOAD_FOLDER", "uploads"), ("SESSION_FILE_DIR", "sessions")):
        val = app.config.get(key)
        if not val:
            path = instance / default
        else:
            path = Path(val)
            if not path.is_absolute():
                path = Path.cwd() / path
        app.config[key] = str(path)
    Path(app.config["UPLOAD_FOLDER"]).mkdir(parents=True, exist_ok=True)


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    app.config.from_pyfile("config.py", silent=True)
    if config_object is not None:
        app.config.from_object(config_object)

    _resolve_dirs(app)

    # Logging must come before blueprints so errors during register are captured
    _init_logging(app)
    _init_sentry(app)

    # Extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    init_services(app)

    # The session cookie is resolved through the session store on every request
    @login_manager.request_loader
    def load_user_from_request(req):
        return auth_service.load_user_from_request(req)

    @login_manager.unauthorized_handler
    def unauthorized():
        raise AuthError("Not authorized.")

    # Blueprints
    app.register_blueprint(errors_bp)  # error handlers
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)

    if app.config.get("AUTO_CREATE_DB", True):
        with app.app_context():
            db.create_all()

    app.logger.info(
        "studydesk ready (db=%s, sessions=%s)",
        app.config["SQLALCHEMY_DATABASE_URI"].split(":", 1)[0],
        app.config.get("SESSION_BACKEND"),
    )
    return app
