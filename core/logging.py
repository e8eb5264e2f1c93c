import sys
from logging.config import dictConfig

from config.settings import settings


def setup_logging(level: str = None):
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "stream": sys.stdout,
                    "formatter": "default",
                },
            },
            "root": {
                "level": (level or settings.LOG_LEVEL).upper(),
                "handlers": ["console"],
            },
        }
    )
