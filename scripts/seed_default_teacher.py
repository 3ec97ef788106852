from __future__ import annotations

import logging
import os

from _bootstrap import load_container

logger = logging.getLogger("seed_default_teacher")


def main() -> None:
    container = load_container()
    try:
        teacher_id = container.user_service.ensure_default_teacher(
            username=os.getenv("TEACHER_USERNAME", "giaovien"),
            password=os.getenv("TEACHER_PASSWORD", "thaybien987"),
            full_name=os.getenv("TEACHER_FULL_NAME", "Thầy Biên"),
            phone=os.getenv("TEACHER_PHONE", "0000000000"),
        )
        if teacher_id is None:
            logger.info("Teacher account already exists")
        else:
            logger.info("Created teacher account %s", teacher_id)
    finally:
        container.conn.close()


if __name__ == "__main__":
    main()
