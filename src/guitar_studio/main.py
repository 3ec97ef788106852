from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .container import Container, build_container
from .courses.controller import register as register_courses
from .documents.controller import register as register_documents
from .enrollments.controller import register as register_enrollments
from .notifications.controller import register as register_notifications
from .products.controller import register as register_products
from .requests.controller import register as register_requests
from .users.controller import register as register_users
from .web.auth import EXTENSION_KEY
from .web.redirects import install_canonical_redirect

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["AUTH_COOKIE_SECURE"] = bool(getattr(settings, "AUTH_COOKIE_SECURE", False))

    if container is None:
        container = build_container(
            mongo_uri=getattr(settings, "MONGODB_URI"),
            db_name=getattr(settings, "MONGODB_DB_NAME", None),
            jwt_secret=getattr(settings, "JWT_SECRET"),
            documents_dir=getattr(settings, "DOCUMENTS_DIR"),
            token_days=int(getattr(settings, "AUTH_TOKEN_DAYS", 7)),
        )
    app.extensions[EXTENSION_KEY] = container

    if app.config["DEBUG"]:
        logger.info("settings=%s", settings_module)

    install_canonical_redirect(
        app,
        bare_host=getattr(settings, "CANONICAL_BARE_HOST", "phucnguyenguitar.com"),
        canonical_base=getattr(settings, "CANONICAL_BASE_URL", "https://www.phucnguyenguitar.com"),
    )

    register_users(app, container)
    register_courses(app, container)
    register_classes(app, container)
    register_enrollments(app, container)
    register_attendance(app, container)
    register_requests(app, container)
    register_documents(app, container)
    register_products(app, container)
    register_notifications(app, container)

    return app
