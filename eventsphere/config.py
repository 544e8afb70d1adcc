"""
Configuration settings for the EventSphere aggregation pipeline
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _split_list(value):
    return [item.strip() for item in value.split(',') if item.strip()]


class Config:
    """Application configuration"""

    # Database Configuration
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///eventsphere.db')

    # Provider credentials (absence switches the adapter to simulated data)
    TICKETMASTER_API_KEY = os.getenv('TICKETMASTER_API_KEY')
    PREDICTHQ_ACCESS_TOKEN = os.getenv('PREDICTHQ_ACCESS_TOKEN')

    # Scraping Configuration
    ENABLED_SOURCES = _split_list(os.getenv('ENABLED_SOURCES', 'ticketmaster,predicthq,allevents,enhanced_mock'))
    SCRAPE_CITIES = _split_list(os.getenv('SCRAPE_CITIES', 'mumbai,delhi,bangalore'))
    SCRAPER_DELAY = float(os.getenv('SCRAPER_DELAY', '2'))  # seconds between sources
    MAX_RETRIES = int(os.getenv('MAX_RETRIES', '3'))
    REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT', '30'))

    # Deduplication
    FUZZY_MATCHER = os.getenv('FUZZY_MATCHER', 'prefix')  # prefix | similarity
    SIMILARITY_THRESHOLD = float(os.getenv('SIMILARITY_THRESHOLD', '0.85'))
    VENUE_RADIUS_MILES = float(os.getenv('VENUE_RADIUS_MILES', '0.5'))

    # Maintenance
    RETENTION_DAYS = int(os.getenv('RETENTION_DAYS', '30'))

    # Logging Configuration
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', 'eventsphere.log')

    # Web
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    @classmethod
    def validate(cls):
        """Validate configuration values that would break a run"""
        problems = []
        if cls.SCRAPER_DELAY < 0:
            problems.append('SCRAPER_DELAY must be >= 0')
        if cls.RETENTION_DAYS < 1:
            problems.append('RETENTION_DAYS must be >= 1')
        if cls.FUZZY_MATCHER not in ('prefix', 'similarity'):
            problems.append(f"FUZZY_MATCHER must be 'prefix' or 'similarity', got '{cls.FUZZY_MATCHER}'")
        if not 0 < cls.SIMILARITY_THRESHOLD <= 1:
            problems.append('SIMILARITY_THRESHOLD must be in (0, 1]')

        if problems:
            raise ValueError(f"Invalid configuration: {'; '.join(problems)}")

        return True
