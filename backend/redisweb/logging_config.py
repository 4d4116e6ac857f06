import logging
import logging.config

from redisweb.config import get_settings

# Loggers that keep their own level regardless of LOG_LEVEL
_FIXED_LEVELS = {
    "uvicorn": "INFO",
    "uvicorn.error": "INFO",
    "uvicorn.access": "INFO",
    # redis-py is chatty about reconnects at DEBUG
    "redis": "WARNING",
}


def _console_logger(level: str) -> dict:
    return {"handlers": ["console"], "level": level, "propagate": False}


def setup_logging():
    """
    Configure global log format

    Every logger writes one line per record to stdout. The application level
    comes from LOG_LEVEL, or DEBUG/INFO depending on the DEBUG flag.
    """
    settings = get_settings()
    log_level = settings.LOG_LEVEL or ("DEBUG" if settings.DEBUG else "INFO")

    loggers = {name: _console_logger(level) for name, level in _FIXED_LEVELS.items()}
    loggers["redisweb"] = _console_logger(log_level)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {
                    "format": "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"handlers": ["console"], "level": log_level},
            "loggers": loggers,
        }
    )
