"""Logging setup for the storefront package, driven by environment variables."""

import os
import logging
import sys
from pythonjsonlogger import jsonlogger

# Logger that every storefront module logs under (storefront.services.*, storefront.utils.*)
PACKAGE_LOGGER = "storefront"

# HTTP transport loggers that are chatty at INFO
TRANSPORT_LOGGERS = ("httpx", "httpcore")


class LoggingConfig:
    """Storefront logging settings."""

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json").lower()
    LOG_HTTP_LEVEL = os.environ.get("LOG_HTTP_LEVEL", "WARNING").upper()
    LOG_MASK_SENSITIVE = os.environ.get("LOG_MASK_SENSITIVE", "true").lower() == "true"
    LOG_ERROR_MAX_LENGTH = int(os.environ.get("LOG_ERROR_MAX_LENGTH", "300"))
    LOG_CORRELATION_ID_HEADER = os.environ.get("LOG_CORRELATION_ID_HEADER", "X-Correlation-ID")
    LOG_SLOW_OPERATION_THRESHOLD_MS = int(os.environ.get("LOG_SLOW_OPERATION_THRESHOLD_MS", "1000"))

    @classmethod
    def build_formatter(cls) -> logging.Formatter:
        if cls.LOG_FORMAT == "json":
            return jsonlogger.JsonFormatter(
                "%(timestamp)s %(levelname)s %(name)s %(correlation_id)s %(message)s",
                rename_fields={"levelname": "level"}
            )
        return logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    @classmethod
    def setup_logging(cls) -> logging.Logger:
        """
        Attach one stdout handler to the storefront package logger.

        Safe to call repeatedly: a handler installed by an earlier call is
        replaced, and handlers owned by the host application are left alone.
        """
        level = getattr(logging, cls.LOG_LEVEL, logging.INFO)
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        package_logger.setLevel(level)

        for handler in list(package_logger.handlers):
            if getattr(handler, "storefront_handler", False):
                package_logger.removeHandler(handler)

        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(cls.build_formatter())
        handler.storefront_handler = True
        package_logger.addHandler(handler)

        http_level = getattr(logging, cls.LOG_HTTP_LEVEL, logging.WARNING)
        for name in TRANSPORT_LOGGERS:
            logging.getLogger(name).setLevel(http_level)

        return package_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
