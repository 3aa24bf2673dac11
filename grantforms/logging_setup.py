"""Logging for the grant form service.

One stdout handler on the root logger. The level follows the deployment
environment: development gets DEBUG from `grantforms` (navigation skips,
disabled bank checks), everything else INFO. SQLAlchemy's engine logger and
httpx are held at WARNING.
"""
from __future__ import annotations
import logging
from logging.config import dictConfig
from typing import Any

LEVEL_BY_ENVIRONMENT = {
    "development": "DEBUG",
    "test": "INFO",
    "staging": "INFO",
    "production": "INFO",
}


def logging_config(environment: str = "development") -> dict[str, Any]:
    level = LEVEL_BY_ENVIRONMENT.get(environment, "INFO")
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": f"%(asctime)s %(levelname)s [{environment}] %(name)s: %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": "INFO", "handlers": ["console"]},
        "loggers": {
            "grantforms": {"level": level},
            "httpx": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "WARNING"},
            "uvicorn": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    }


def configure_logging(environment: str = "development") -> None:
    """Apply `logging_config(environment)` unless the root logger is already set up."""
    if logging.getLogger().handlers:
        return
    dictConfig(logging_config(environment))


__all__ = ["LEVEL_BY_ENVIRONMENT", "logging_config", "configure_logging"]
