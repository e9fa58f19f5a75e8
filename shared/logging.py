"""
Logging utilities - framework-agnostic re-exports.

Re-exports from utils.logger and utils.logging_config so service and
infrastructure code imports logging from one place.
"""

from utils.logger import get_logger, log_with_context
from utils.logging_config import configure_structlog, hash_subject, setup_logging

__all__ = [
    "get_logger",
    "log_with_context",
    "configure_structlog",
    "hash_subject",
    "setup_logging",
]
