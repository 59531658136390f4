"""Logging configuration for the application."""

import logging
import sys

from preschool.core.config import get_settings

# Outbound HTTP client logs every request line at INFO (including query strings
# with emails); keep it at WARNING unless debugging.
_NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Output goes to stdout.
    """
    settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(log_level if settings.debug else logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)


def mask_code(code: str | None) -> str:
    """Return an invitation code safe for logs (first two characters only)."""
    if not code:
        return "<none>"
    return f"{code[:2]}***"
