"""Logging configuration for the currency converter."""

from common.logging_config import configure_structlog, get_logger
from currency_converter.config import settings

# Configure structlog for the converter
configure_structlog("currency-converter", level=settings.log_level)

__all__ = ["configure_logging", "get_logger"]


def configure_logging(level: str | None = None) -> None:
    """Reconfigure structured logging, e.g. with a different level.

    Args:
        level: Log level name; defaults to the configured one
    """
    configure_structlog("currency-converter", level=level or settings.log_level)
