"""Structured logging configuration for the service entry point."""

import logging
import logging.config
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from feedbackkit.config import Settings, settings as default_settings


def build_logging_config(settings: Settings) -> dict[str, Any]:
    """Return the dictConfig payload for the given settings."""

    if settings.is_production:
        console_formatter = "json"
    elif settings.is_development:
        console_formatter = "detailed"
    else:
        console_formatter = "simple"

    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": "DEBUG" if settings.is_development else "INFO",
            "formatter": console_formatter,
            "stream": sys.stdout,
        },
    }

    extra_handlers: list[str] = []
    # File handlers are opt-in and never used during automated tests.
    if settings.log_to_file and not settings.is_testing:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        handlers.update(
            {
                "file": {
                    "class": "logging.FileHandler",
                    "level": "INFO",
                    "formatter": "detailed",
                    "filename": str(log_dir / f"feedbackkit-{timestamp}.log"),
                    "encoding": "utf-8",
                },
                "error_file": {
                    "class": "logging.FileHandler",
                    "level": "ERROR",
                    "formatter": "detailed",
                    "filename": str(log_dir / f"error-{timestamp}.log"),
                    "encoding": "utf-8",
                },
            }
        )
        extra_handlers = ["file", "error_file"]

    handler_names = ["console"] + extra_handlers

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {
                "format": "%(levelname)s - %(message)s",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(filename)s %(lineno)d %(message)s",
            },
        },
        "handlers": handlers,
        "loggers": {
            "feedbackkit": {
                "level": settings.log_level,
                "handlers": handler_names,
                "propagate": False,
            },
            "uvicorn": {
                "level": "INFO",
                "handlers": handler_names,
                "propagate": False,
            },
            "httpx": {
                "level": "WARNING",
                "handlers": handler_names,
                "propagate": False,
            },
        },
        "root": {
            "level": settings.log_level,
            "handlers": handler_names,
        },
    }


def setup_logging(settings: Settings | None = None) -> None:
    """Configure logging handlers, formatters and levels."""
    settings = settings or default_settings
    logging.config.dictConfig(build_logging_config(settings))

    logger = logging.getLogger("feedbackkit")
    logger.info(
        "Logging initialized - Environment: %s, Level: %s",
        settings.environment,
        settings.log_level,
    )
    if settings.is_development:
        logger.debug("Running in development mode with verbose logging")


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the ``feedbackkit`` namespace.

    Args:
        name: Logger name, typically __name__ of the calling module

    Returns:
        Configured logger instance
    """
    if name == "feedbackkit" or name.startswith("feedbackkit."):
        return logging.getLogger(name)
    return logging.getLogger(f"feedbackkit.{name}")
