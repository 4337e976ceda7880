# gh_explorer/core/logging_config.py - Structured logging configuration
import logging
import os
import sys

from pythonjsonlogger import jsonlogger


def setup_logging(
    log_level: str | None = None, log_format: str | None = None, logger_name: str | None = None
) -> logging.Logger:
    """
    Setup structured logging with JSON format support

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env LOG_LEVEL or INFO
        log_format: Log format (json or text). Defaults to env LOG_FORMAT or json
        logger_name: Logger name. Defaults to root logger

    Returns:
        Configured logger instance
    """
    log_level = log_level or os.getenv("LOG_LEVEL", "INFO")
    log_format = log_format or os.getenv("LOG_FORMAT", "json")

    if logger_name:
        logger = logging.getLogger(logger_name)
    else:
        logger = logging.getLogger()

    logger.setLevel(log_level.upper())

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level.upper())

    if log_format.lower() == "json":
        formatter = jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level", "name": "module"},
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Named loggers stop here; the root logger has nowhere to propagate anyway
    logger.propagate = logger_name is None

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a gh_explorer module

    Module loggers propagate to the root logger, so a single setup_logging()
    call at the entry point (API or CLI) decides format and level.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context):
    """
    Log message with additional context (useful for JSON logs)

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **context: Additional context as keyword arguments

    Example:
        log_with_context(
            logger,
            "info",
            "Cache hit",
            language="Python",
            age_seconds=12.5,
        )
    """
    log_method = getattr(logger, level.lower())

    # For JSON formatter, extra fields are automatically included
    log_method(message, extra=context)
