from __future__ import annotations

import logging

from _bootstrap import load_container

logger = logging.getLogger("seed_courses")


def main() -> None:
    container = load_container()
    try:
        inserted = container.course_service.seed_standard_courses()
        if inserted:
            logger.info("Inserted %d standard courses", inserted)
        else:
            logger.info("Courses already present, nothing to seed")
    finally:
        container.conn.close()


if __name__ == "__main__":
    main()
