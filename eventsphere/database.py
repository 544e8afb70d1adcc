"""
Database setup and connection utilities
"""
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from eventsphere.web.models import create_tables, drop_tables, engine as default_engine
from eventsphere.config import Config
from eventsphere.logger import get_logger

logger = get_logger('database')


def setup_database(engine=None):
    """Create all tables that do not exist yet"""
    try:
        logger.info("Setting up database...")
        logger.info(f"Database URL: {Config.DATABASE_URL if engine is None else engine.url}")
        create_tables(bind=engine or default_engine)
        logger.info("Database tables created successfully")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Failed to setup database: {e}")
        return False


def test_connection(engine=None):
    """Run SELECT 1 against the engine"""
    try:
        logger.info("Testing database connection...")
        with (engine or default_engine).connect() as connection:
            connection.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False


def reset_database(engine=None):
    """Drop and recreate all tables"""
    try:
        logger.warning("Resetting database - all data will be lost!")
        drop_tables(bind=engine or default_engine)
        create_tables(bind=engine or default_engine)
        logger.info("Database reset successfully")
        return True
    except SQLAlchemyError as e:
        logger.error(f"Failed to reset database: {e}")
        return False


if __name__ == "__main__":
    logger.info("Starting database setup...")

    if test_connection():
        if setup_database():
            logger.info("Database setup completed successfully!")
        else:
            logger.error("Database setup failed!")
    else:
        logger.error("Cannot setup database - connection failed!")
