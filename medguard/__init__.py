from __future__ import annotations

import logging
import os
from datetime import date
from logging.handlers import RotatingFileHandler
from typing import Any, Mapping, Optional

from flask import Flask, render_template
from dotenv import load_dotenv

from .config import Config
from .extensions import db, login_manager, csrf


def _configure_logging(app: Flask) -> None:
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    logging.getLogger("medguard").setLevel(level)

    log_file = app.config.get("LOG_FILE")
    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=5)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
        logging.getLogger().addHandler(file_handler)


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config())
    if overrides:
        app.config.update(overrides)

    # instance/ precisa existir antes do sqlite e dos uploads
    os.makedirs(app.instance_path, exist_ok=True)

    upload_folder = app.config.get("UPLOAD_FOLDER") or os.path.join(app.instance_path, "uploads")
    app.config["UPLOAD_FOLDER"] = upload_folder
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    app.config.setdefault("DEMO_DATA_FOLDER", os.path.join(app.instance_path, "demo"))

    _configure_logging(app)

    # init extensions
    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)

    # user loader
    from .models.user import User, DemoUser

    @login_manager.user_loader
    def load_user(user_id: str):
        if user_id == DemoUser.id:
            return DemoUser() if app.config.get("DEMO_MODE_ENABLED") else None
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    login_manager.login_view = "auth.login"
    login_manager.login_message = "Faça login para continuar."
    login_manager.login_message_category = "warning"

    # register blueprints
    from .blueprints.main.routes import main_bp
    from .blueprints.auth.routes import auth_bp
    from .blueprints.employees.routes import employees_bp
    from .blueprints.certificates.routes import certificates_bp
    from .blueprints.alerts.routes import alerts_bp
    from .blueprints.users.routes import users_bp
    from .blueprints.api.routes import bp as api_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(certificates_bp)
    app.register_blueprint(alerts_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(api_bp)

    _register_template_helpers(app)
    _register_error_handlers(app)

    # create db tables
    with app.app_context():
        # garante que todos os models sejam importados/registrados no metadata
        from . import models  # noqa: F401
        db.create_all()

    # CLI commands
    from .seed import register_seed_command
    register_seed_command(app)

    return app


def _register_template_helpers(app: Flask) -> None:
    from flask_login import current_user
    from .utils.dates import format_br
    from .utils.security import has_permission
    from .services.alerts import count_attention
    from .services.repository import load_visible

    app.jinja_env.filters["br_date"] = format_br

    def alert_count() -> int:
        if not has_permission(current_user, "CERT_READ"):
            return 0
        _, certificates = load_visible()
        return count_attention(certificates, date.today())

    @app.context_processor
    def inject_helpers():
        return {
            "can": lambda perm: has_permission(current_user, perm),
            "today": date.today(),
            "alert_count": alert_count,
        }


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(403)
    def forbidden(_e):
        return render_template("errors/403.html"), 403

    @app.errorhandler(404)
    def not_found(_e):
        return render_template("errors/404.html"), 404

    @app.errorhandler(413)
    def too_large(_e):
        return render_template("errors/413.html"), 413
