"""
Structured Logging: JSON Output with Context Fields

Provides:
- JsonFormatter: one JSON object per log line
- StructuredLogger: keyword fields instead of formatted strings
- log_context: scoped fields (e.g. the collector window) added to every line
- setup_logging: root logger configuration, JSON or plain text

Library modules log through logging.getLogger(__name__); this module
only decides how those records are rendered.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Optional, TextIO, Union

from timerecords.core.config import ObservabilityConfig


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def parse(cls, level: Union[LogLevel, int, str]) -> LogLevel:
        if isinstance(level, str):
            return cls[level.upper()]
        return cls(level)


# Scoped fields merged into every formatted record
_log_context: ContextVar[dict[str, Any]] = ContextVar("timerecords_log_context", default={})

# Attributes every logging.LogRecord carries; anything else came in via extra=
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """
    JSON log formatter.

    Output keys: @timestamp, level, logger, message, then context
    fields, then the record's extra fields (extras win on collision).
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "@timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(_log_context.get())
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                data[key] = value

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        return json.dumps(data, default=str)


class StructuredLogger:
    """
    Logger taking fields as keyword arguments.

    Usage:
        log = StructuredLogger("timerecords.stream")
        log.warning("Tag does not exist in registry, creating new series", tag="pump.rpm")

        with log_context(window_start=10.0):
            log.info("Window released", tags=3)
    """

    __slots__ = ("_logger", "_default_extra")

    def __init__(
        self,
        name: str,
        level: Optional[LogLevel] = None,
    ) -> None:
        self._logger = logging.getLogger(name)
        if level is not None:
            self._logger.setLevel(level.value)
        self._default_extra: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(LogLevel.ERROR, message, **kwargs)

    def _log(self, level: LogLevel, message: str, **kwargs: Any) -> None:
        if self._logger.isEnabledFor(level.value):
            extra = {**self._default_extra, **kwargs}
            self._logger.log(level.value, message, extra=extra)

    def with_extra(self, **kwargs: Any) -> StructuredLogger:
        """Child logger with additional default fields."""
        child = StructuredLogger(self._logger.name)
        child._default_extra = {**self._default_extra, **kwargs}
        return child


class log_context:
    """Context manager adding fields to every record formatted inside it."""

    __slots__ = ("_fields", "_token")

    def __init__(self, **fields: Any) -> None:
        self._fields = fields
        self._token: Optional[Token[dict[str, Any]]] = None

    def __enter__(self) -> log_context:
        self._token = _log_context.set({**_log_context.get(), **self._fields})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None


def setup_logging(
    level: Union[LogLevel, int, str] = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Minimum log level (enum, int or name)
        json_output: Use JSON formatting
        stream: Output stream (default: stderr)
    """
    level = LogLevel.parse(level)
    root = logging.getLogger()
    root.setLevel(level.value)
    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level.value)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        ))
    root.addHandler(handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)


def configure_logging(config: ObservabilityConfig, stream: Optional[TextIO] = None) -> None:
    """setup_logging driven by an ObservabilityConfig."""
    setup_logging(config.log_level, json_output=config.log_json, stream=stream)
