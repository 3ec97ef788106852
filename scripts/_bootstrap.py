from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from dotenv import load_dotenv  # noqa: E402

from config import get_settings_module  # noqa: E402


def load_container():
    """Settings + Mongo-backed container for one-off scripts."""

    from guitar_studio.container import build_container

    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    return build_container(
        mongo_uri=settings.MONGODB_URI,
        db_name=settings.MONGODB_DB_NAME,
        jwt_secret=settings.JWT_SECRET,
        documents_dir=settings.DOCUMENTS_DIR,
        token_days=settings.AUTH_TOKEN_DAYS,
    )
