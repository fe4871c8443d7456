from __future__ import annotations

import logging

from app.infrastructure.db.engine import create_all_tables, get_engine
from app.shared.config import get_settings


logger = logging.getLogger(__name__)


def bootstrap_database(dsn: str) -> None:
    engine = get_engine(dsn)
    create_all_tables(engine)
    logger.info("Account tables are in place.")


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    if not settings.postgres_dsn:
        raise SystemExit("POSTGRES_DSN is required.")
    bootstrap_database(settings.postgres_dsn)


if __name__ == "__main__":
    main()
