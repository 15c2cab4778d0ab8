# logging_config.py

import logging
import logging.config
import os

LOG_DIR = "logs"


LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        },
        "verbose": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - "
            "%(message)s [%(filename)s:%(lineno)s]",
        },
    },
    "handlers": {
        "console": {
            "level": "INFO",
            "class": "logging.StreamHandler",
            "formatter": "default",
        },
        "file": {
            "level": "DEBUG",
            "class": "logging.FileHandler",
            "filename": f"{LOG_DIR}/app.log",
            "formatter": "verbose",
        },
        "error_file": {
            "level": "ERROR",
            "class": "logging.FileHandler",
            "filename": f"{LOG_DIR}/error.log",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "uvicorn": {
            "level": "INFO",
            "handlers": ["console", "file"],
            "propagate": False,
        },
        # Records propagate to the root handlers
        "src.fleet_manager.analytics": {"level": "DEBUG"},
    },
    "root": {"level": "INFO", "handlers": ["console", "file", "error_file"]},
}


def setup_logging():
    if not os.path.exists(LOG_DIR):
        os.mkdir(LOG_DIR)
    logging.config.dictConfig(LOGGING_CONFIG)
