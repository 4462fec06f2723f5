"""
Observability module: Structured logging.
"""

from timerecords.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    configure_logging,
    log_context,
    setup_logging,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "StructuredLogger",
    "configure_logging",
    "log_context",
    "setup_logging",
]
