"""Logging setup handed to uvicorn as its dictConfig."""

import copy

from uvicorn.config import LOGGING_CONFIG


def build_log_config(level: str = "info") -> dict:
    """Extend uvicorn's default config with the server's own loggers.

    Application messages share uvicorn's stderr handler; access lines go to
    stdout with no prefix so they stay in combined log format.
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    level_name = level.upper() if level != "trace" else "DEBUG"

    config["formatters"]["access_line"] = {"format": "%(message)s"}
    config["handlers"]["access_line"] = {
        "formatter": "access_line",
        "class": "logging.StreamHandler",
        "stream": "ext://sys.stdout",
    }
    config["loggers"]["portfolio_server"] = {
        "handlers": ["default"],
        "level": level_name,
        "propagate": False,
    }
    config["loggers"]["portfolio_server.access"] = {
        "handlers": ["access_line"],
        "level": "INFO",
        "propagate": False,
    }
    return config
