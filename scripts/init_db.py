"""Initialize the database: create the tables and seed default data"""
import sys
import os

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import DatabaseManager
from config.log_config import setup_logging
from config.settings import settings
from loguru import logger


def init_database(database_url=None):
    """Create every table and seed default staff and services"""
    setup_logging(settings.log_level, settings.log_file)
    logger.info("Initializing database...")

    db = DatabaseManager(database_url)

    logger.info("Creating tables...")
    db.create_tables()

    logger.info("Inserting seed data...")
    created = db.seed()
    for service in db.services.list_all():
        logger.info(f"Service: {service.name} ({service.category}) {float(service.price):.2f}")

    db.close()
    logger.info("Database initialization completed!")
    return created


if __name__ == "__main__":
    init_database(sys.argv[1] if len(sys.argv) > 1 else None)
