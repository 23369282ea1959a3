# pricebook/core/logging.py

import sys
from logging.config import dictConfig

from pricebook.core.config import LOG_LEVEL

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# the access logger always receives these through `extra`
ACCESS_FORMAT = (
    "%(asctime)s | ACCESS | %(request_id)s | %(client_addr)s | %(user_id)s | "
    "%(message)s | %(status_code)s | %(process_time_ms)sms"
)


def build_logging_config(level: str = LOG_LEVEL) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": DEFAULT_FORMAT},
            "access": {"format": ACCESS_FORMAT},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "default",
            },
            "access_console": {
                "class": "logging.StreamHandler",
                "stream": sys.stdout,
                "formatter": "access",
            },
        },
        "loggers": {
            "access": {
                "handlers": ["access_console"],
                "level": "INFO",
                "propagate": False,
            },
            # request_logging_middleware replaces uvicorn's access lines
            "uvicorn.access": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "WARNING"},
            "passlib": {"level": "ERROR"},
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }


def setup_logging(level: str = LOG_LEVEL):
    dictConfig(build_logging_config(level))
