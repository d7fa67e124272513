"""
Initialize Database Script
Creates the chat tables in the configured database and verifies them.
Safe to run repeatedly; existing tables and rows are left alone.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from groupchat.config.settings import settings
from groupchat.database.engine import create_engine_from_settings, ensure_database_directory
from groupchat.database.schema import TABLE_NAMES, init_schema
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def verify_tables(engine: Engine) -> bool:
    """Log the presence of each table; True when all exist"""
    logger.info("Verifying tables...")
    existing = set(inspect(engine).get_table_names())
    all_present = True

    for table in TABLE_NAMES:
        if table in existing:
            logger.info(f"Table '{table}' exists")
        else:
            logger.error(f"Table '{table}' does not exist!")
            all_present = False

    return all_present


def main():
    """Main function to initialize the database"""
    engine = create_engine_from_settings(settings)
    try:
        logger.info(f"Initializing database at: {engine.url.render_as_string(hide_password=True)}")

        ensure_database_directory(engine)
        init_schema(engine)

        if not verify_tables(engine):
            logger.error("Database initialization incomplete")
            sys.exit(1)

        logger.info("Database initialization completed successfully")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        sys.exit(1)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
