"""
Logging configuration for EventSphere
"""
import logging
import sys
from eventsphere.config import Config


def setup_logging():
    """Set up logging configuration"""

    # Create logger
    logger = logging.getLogger('eventsphere')
    logger.setLevel(getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))

    # Clear any existing handlers
    logger.handlers.clear()

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # File handler (LOG_FILE="" disables it)
    if Config.LOG_FILE:
        file_handler = logging.FileHandler(Config.LOG_FILE)
        file_handler.setLevel(getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Prevent duplicate logs
    logger.propagate = False

    return logger


def get_logger(name=None):
    """Get a logger instance"""
    if name:
        return logging.getLogger(f'eventsphere.{name}')
    return logging.getLogger('eventsphere')


# Set up default logger
logger = setup_logging()
