import logging
import logging.config
import os

from config.config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Report blocks are echoed to the console as well as the log file
REPORT_LOGGER = "core.reporter"


def build_logging_config(log_file: str, level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": LOG_FORMAT,
            },
            "plain": {
                "format": "%(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "plain",
                "level": level,
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.FileHandler",
                "filename": log_file,
                "formatter": "default",
                "level": level,
            },
        },
        "loggers": {
            REPORT_LOGGER: {
                "handlers": ["console"],
                "level": level,
                "propagate": True,
            },
        },
        "root": {
            "handlers": ["file"],
            "level": level,
        },
    }


def setup_logging(log_file: str = None, level: str = None):
    """
    Route all log records to ``log_file`` and report blocks to stdout too.

    Defaults come from ``Config.LOG_FILE`` and ``Config.LOG_LEVEL``.

    Raises:
        ValueError: If the file handler cannot be created (dictConfig wraps
            the underlying OSError).
    """
    log_file = log_file or Config.LOG_FILE
    level = level or Config.LOG_LEVEL
    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_file, level))
