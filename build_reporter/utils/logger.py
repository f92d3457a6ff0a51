"""Structured JSON logging configuration."""

import logging
import re
import sys
from pythonjsonlogger import jsonlogger


_API_KEY_PATTERN = re.compile(r'(api_key=)[^&\s"\']+')


class ApiKeyRedactingFilter(logging.Filter):
    """Mask api_key query parameters that end up in log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "api_key=" in message:
            record.msg = _API_KEY_PATTERN.sub(r'\1****', message)
            record.args = None
        return True


def redact_httpx_logs() -> None:
    """Attach the api_key redaction filter to the httpx logger, once."""
    httpx_logger = logging.getLogger("httpx")
    if not any(isinstance(f, ApiKeyRedactingFilter) for f in httpx_logger.filters):
        httpx_logger.addFilter(ApiKeyRedactingFilter())


def setup_logger(name: str = "build_reporter", level: str = "INFO") -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers to avoid duplicates
    logger.handlers = []

    # Create console handler with JSON formatter
    handler = logging.StreamHandler(sys.stdout)
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(name)s %(levelname)s %(message)s',
        timestamp=True
    )
    handler.setFormatter(formatter)
    handler.addFilter(ApiKeyRedactingFilter())
    logger.addHandler(handler)

    # Don't propagate to root logger
    logger.propagate = False

    # httpx logs full request URLs (including the api_key parameter) at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    redact_httpx_logs()

    return logger
