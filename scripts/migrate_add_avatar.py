"""Gán avatar mặc định cho mọi user chưa có trường `avatar`."""

from __future__ import annotations

import logging
import sys

from _bootstrap import load_container

from guitar_studio.core.constants import DEFAULT_AVATAR

logger = logging.getLogger("migrate_add_avatar")


def main() -> int:
    container = load_container()
    try:
        matched, modified = container.users_repo.backfill_avatar(DEFAULT_AVATAR)
        logger.info("Matched %d users, updated %d with avatar %s", matched, modified, DEFAULT_AVATAR)
        return 0
    except Exception:
        logger.exception("Avatar migration failed")
        return 1
    finally:
        container.conn.close()


if __name__ == "__main__":
    sys.exit(main())
