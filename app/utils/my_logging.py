# app/utils/my_logging.py
"""Logging configuration shared by the API process and the Celery worker"""
import logging
import sys
from app.config.settings import get_settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(correlation_id)s] %(message)s"

# Chatty third-party loggers and the level they are capped at
THIRD_PARTY_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "googleapiclient.discovery": logging.WARNING,
    # Logs a warning on every build() when file_cache is unavailable
    "googleapiclient.discovery_cache": logging.ERROR,
    "uvicorn.access": logging.WARNING,
    "celery.redirected": logging.WARNING,
}


class CorrelationIdFilter(logging.Filter):
    """Guarantee every record has a correlation_id so LOG_FORMAT never fails"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True


def setup_logging(verbose=True):
    """Configure application logging. verbose=False keeps only warnings and errors."""
    settings = get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO) if verbose else logging.WARNING

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    if not settings.DEBUG:
        for name, cap in THIRD_PARTY_LEVELS.items():
            logging.getLogger(name).setLevel(cap)
