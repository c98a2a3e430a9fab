"""
Logging setup.

Modules log through logging.getLogger(__name__); this module
only decides level and format for the whole process.
"""

import logging

from bookkeeping.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger from LOG_LEVEL (or an explicit level)."""
    settings = get_settings()
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL),
        format=LOG_FORMAT,
    )
    # SQL echo is noisy; only surface it when debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )
