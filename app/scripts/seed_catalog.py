"""
Insert missing roles, permissions and role grants. Safe to re-run. From project root:

  python -m app.scripts.seed_catalog
"""

import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from app.core.database import SessionLocal
from app.services.catalog import seed_catalog

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    db = SessionLocal()
    try:
        result = seed_catalog(db)
        if not result.changed:
            logger.info("Catalog already complete; nothing to do")
        return 0
    except SQLAlchemyError as e:
        logger.exception("Catalog seeding failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
