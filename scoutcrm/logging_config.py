"""Console logging for the API server and the sync CLI."""
import logging
import logging.config

# Loggers whose INFO lines describe sync outcomes
APP_LOGGERS = ("scoutcrm", "sync_runner")


def setup_logging(
    level: str = "INFO",
    access_log: bool = True,
    *,
    datefmt: str = "%H:%M:%S",
) -> None:
    """Configure handlers once per process.

    The CLI passes a full ``datefmt`` because batch runs can span midnight.
    """
    level = level.upper()
    app_loggers = {
        name: {"level": level, "handlers": ["console"], "propagate": False}
        for name in APP_LOGGERS
    }
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                        "datefmt": datefmt},
            # Uvicorn pre-formats access log lines
            "access_simple": {"format": "%(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default"},
            "access":  {"class": "logging.StreamHandler", "formatter": "access_simple"},
        },
        "loggers": {
            **app_loggers,
            "uvicorn.error":  {"level": level, "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": ("INFO" if access_log else "WARNING"),
                               "handlers": ["access"], "propagate": False},
            # one line per external call is noise next to the per-player outcome lines
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    })
