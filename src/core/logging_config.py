"""Logging configuration.

Sets up a single console handler for the application and uvicorn loggers.
"""

import logging.config

from config import LOG_LEVEL


def setup_logging(level: str = None) -> None:
    """Configure root logging.

    Args:
        level: Optional level name overriding LOG_LEVEL.
    """
    level = (level or LOG_LEVEL).upper()
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {"handlers": ["console"], "level": level},
            "loggers": {
                "uvicorn": {"level": level},
                # SQL echo is too noisy below WARNING
                "sqlalchemy.engine": {"level": "WARNING"},
            },
        }
    )
