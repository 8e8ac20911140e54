from logging.config import dictConfig

from adherence_engine.config import settings
from adherence_engine.utils.logger import TraceAwareFormatter


# Central logging configuration
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "()": TraceAwareFormatter,
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(trace_id)s] - %(message)s",
        },
        "detailed": {
            "()": TraceAwareFormatter,
            "format": "%(asctime)s - %(name)s - %(levelname)s - [%(trace_id)s] - %(threadName)s - %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
        "detailed_console": {
            "class": "logging.StreamHandler",
            "formatter": "detailed",
        },
    },
    "root": {
        "level": "DEBUG" if settings.DEBUG else "INFO",
        "handlers": ["console"],
    },
    "loggers": {
        "adherence_engine": {
            "level": "DEBUG" if settings.DEBUG else "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "adherence_engine.jobs": {
            "level": "INFO",
            "handlers": ["detailed_console"],
            "propagate": False,
        },
        "sqlalchemy.engine": {
            "level": "INFO" if settings.DEBUG else "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
        "redis": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
    },
}

def configure_logging():
    """Configure logging for the engine."""
    dictConfig(LOGGING_CONFIG)
