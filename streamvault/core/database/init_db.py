# File: streamvault/core/database/init_db.py

import logging
from typing import Optional

from sqlalchemy import create_engine, inspect
from sqlalchemy_utils import database_exists, create_database

from streamvault.core.config.settings import settings
from streamvault.core.database.base import Base

logger = logging.getLogger(__name__)


def init_db(database_url: Optional[str] = None) -> list:
    """
    Creates the database if it is missing, then any missing tables.
    Returns the table names present afterwards.
    """
    url = database_url or settings.DATABASE_URL
    engine = create_engine(url)

    try:
        if not database_exists(engine.url):
            logger.info(f"Creating database {engine.url.database}")
            create_database(engine.url)

        # Register every model on Base.metadata
        import streamvault.features.status_tracker.data.sql_models  # noqa: F401
        import streamvault.features.notifications.data.sql_models  # noqa: F401

        Base.metadata.create_all(bind=engine)
        tables = inspect(engine).get_table_names()
        logger.info(f"Database ready: {tables}")
        return tables
    finally:
        engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
