from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_mail import Mail

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import ok, register_error_handlers
from .container import Container, build_container
from .database.bootstrap import ensure_admin_user, ensure_demo_packages, ensure_indexes
from .discounts.controller import register as register_discounts
from .employees.controller import register as register_employees
from .members.controller import register as register_members
from .notifications.mailer import FlaskMailSender
from .packages.controller import register as register_packages
from .registrations.controller import register as register_registrations
from .schedules.controller import register as register_schedules
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_MAIL_KEYS = (
    "MAIL_SERVER",
    "MAIL_PORT",
    "MAIL_USE_TLS",
    "MAIL_USE_SSL",
    "MAIL_USERNAME",
    "MAIL_PASSWORD",
    "MAIL_DEFAULT_SENDER",
    "MAIL_SUPPRESS_SEND",
)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    Pass a ready `container` (e.g. over in-memory repositories) to skip MongoDB entirely.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["APP_NAME"] = getattr(settings, "APP_NAME", "Gym Backend")
    app.json.sort_keys = False
    for key in _MAIL_KEYS:
        if hasattr(settings, key):
            app.config[key] = getattr(settings, key)

    mail = Mail(app)

    if container is None:
        mongo_config = getattr(settings, "MONGO_CONFIG")
        logger.info("settings=%s db=%s/%s", settings_module, mongo_config.get("uri"), mongo_config.get("database"))

        container = build_container(
            mongo_config=mongo_config,
            token_config={
                "access_secret": getattr(settings, "JWT_ACCESS_SECRET"),
                "refresh_secret": getattr(settings, "JWT_REFRESH_SECRET"),
                "access_ttl_minutes": getattr(settings, "ACCESS_TOKEN_TTL_MINUTES", 15),
                "refresh_ttl_days": getattr(settings, "REFRESH_TOKEN_TTL_DAYS", 7),
            },
            mail_sender=FlaskMailSender(mail, sender=app.config.get("MAIL_DEFAULT_SENDER")),
        )

        db = container.conn.database()
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            collections = ensure_indexes(db)
            logger.info("indexes ready (collections=%s)", len(collections))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_admin_user(
                db,
                email=getattr(settings, "SEED_ADMIN_EMAIL"),
                password=getattr(settings, "SEED_ADMIN_PASSWORD"),
            )
            inserted = ensure_demo_packages(db)
            logger.info("demo seed ready (new packages=%s)", inserted)
    else:
        logger.info("settings=%s (prebuilt container)", settings_module)

    app.extensions["gym_container"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_members(app, container)
    register_packages(app, container)
    register_discounts(app, container)
    register_registrations(app, container)
    register_attendance(app, container)
    register_employees(app, container)
    register_schedules(app, container)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"app": app.config["APP_NAME"], "status": "ok"})

    return app
