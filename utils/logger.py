"""
Logger factory for the passcode service.

Provides:
- get_logger(): Get a configured logger instance
- log_with_context(): Bind request-scoped context to a logger
"""

import structlog
from structlog.stdlib import BoundLogger

from . import logging_config  # noqa: F401  (configures structlog on import)


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured structlog BoundLogger instance

    Example:
        >>> from utils.logger import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("otp_issued", subject="a@x.com", channel="email")
    """
    return structlog.get_logger(name)


def log_with_context(logger: BoundLogger, **context) -> BoundLogger:
    """
    Bind context to a logger for all subsequent log calls.

    Args:
        logger: The logger to bind context to
        **context: Key-value pairs to bind

    Returns:
        Logger with bound context

    Example:
        >>> log = log_with_context(get_logger(__name__), subject="a@x.com")
        >>> log.info("otp_sent")  # Will include subject
    """
    return logger.bind(**context)
