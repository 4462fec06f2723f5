"""
Error Hierarchy for TimeRecords

Design Principles:
- Invalid arguments are fatal and surface immediately to the caller
- Out-of-range queries are policy, not errors (see analysis modules)
- Every error carries a code, a message and debugging context

Each error type includes:
- Unique error code for programmatic handling
- Human-readable message for logging
- Optional cause for root cause analysis
- Creation time for correlation with log records

Usage:
    try:
        interpolate(series, 2.5, order=3)
    except InvalidArgumentError as e:
        log.error("bad query", **e.to_dict())
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional
from uuid import uuid4


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Unique error codes for programmatic error handling.

    Codes are grouped by subsystem:
    - 1xxx: Argument errors
    - 2xxx: Series invariant errors
    - 3xxx: Collector errors
    - 9xxx: Configuration/internal errors
    """

    # Argument errors (1xxx)
    ARGUMENT_UNSUPPORTED_ORDER = 1001
    ARGUMENT_MISMATCHED_TIMESTAMPS = 1002
    ARGUMENT_UNSORTED_TIMES = 1003
    ARGUMENT_INVALID_INDEX = 1004
    ARGUMENT_UNSUPPORTED_METHOD = 1005

    # Series invariant errors (2xxx)
    SERIES_OUT_OF_ORDER = 2001
    SERIES_EMPTY = 2002
    SERIES_LENGTH_MISMATCH = 2003

    # Collector errors (3xxx)
    COLLECTOR_NEGATIVE_PARAMETER = 3001
    COLLECTOR_CLOSED = 3002

    # Configuration/internal errors (9xxx)
    INTERNAL_CONFIGURATION_ERROR = 9001


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class TimeRecordsError(Exception):
    """
    Base class for all TimeRecords errors.

    Provides common infrastructure for error handling:
    - Unique error ID for log correlation
    - Error code for programmatic handling
    - Creation time
    - Cause chain for root cause analysis
    """

    code: ErrorCode
    message: str
    error_id: str = field(default_factory=lambda: str(uuid4()))
    created_at: float = field(default_factory=time.time)
    cause: Optional[Exception] = None
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def with_context(self, **kwargs: Any) -> TimeRecordsError:
        """Add context to error (returns new instance of the same class)."""
        return type(self)(
            code=self.code,
            message=self.message,
            error_id=self.error_id,
            created_at=self.created_at,
            cause=self.cause,
            context={**self.context, **kwargs},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize error to dictionary for structured logging."""
        return {
            "error_id": self.error_id,
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "created_at": self.created_at,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (id={self.error_id[:8]})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r}, "
            f"error_id={self.error_id!r})"
        )


# =============================================================================
# ARGUMENT ERRORS
# =============================================================================
@dataclass
class InvalidArgumentError(TimeRecordsError, ValueError):
    """
    A caller passed an argument the library refuses to guess about.

    Also a ValueError so generic handlers keep working.
    """

    @classmethod
    def unsupported_order(cls, order: Any) -> InvalidArgumentError:
        """Order other than hold-last (0) or linear (1)."""
        return cls(
            code=ErrorCode.ARGUMENT_UNSUPPORTED_ORDER,
            message=(
                "Order only supports zero-order-hold (order=0) and "
                f"first-order-interpolation (order=1), got {order!r}"
            ),
            context={"order": repr(order)},
        )

    @classmethod
    def mismatched_timestamps(cls, timestamps: list[float]) -> InvalidArgumentError:
        """Records combined element-wise must share one timestamp."""
        return cls(
            code=ErrorCode.ARGUMENT_MISMATCHED_TIMESTAMPS,
            message=f"Cannot combine time records for different timestamps {timestamps}",
            context={"timestamps": list(timestamps)},
        )

    @classmethod
    def unsorted_times(cls, name: str = "times") -> InvalidArgumentError:
        """Boundary timestamps must be ascending."""
        return cls(
            code=ErrorCode.ARGUMENT_UNSORTED_TIMES,
            message=f"Timestamps in '{name}' must be sorted in ascending order",
            context={"argument": name},
        )

    @classmethod
    def invalid_index(cls, index: Any, reason: str) -> InvalidArgumentError:
        """Unsupported indexer for a series or view."""
        return cls(
            code=ErrorCode.ARGUMENT_INVALID_INDEX,
            message=f"Invalid index {type(index).__name__}: {reason}",
            context={"index_type": type(index).__name__, "reason": reason},
        )

    @classmethod
    def unsupported_method(cls, method: str, supported: list[str]) -> InvalidArgumentError:
        """Unknown named method."""
        return cls(
            code=ErrorCode.ARGUMENT_UNSUPPORTED_METHOD,
            message=f"Method {method!r} is not supported, use one of {supported}",
            context={"method": method, "supported": supported},
        )

    @classmethod
    def empty_series(cls, operation: str) -> InvalidArgumentError:
        """Operation requires at least one record."""
        return cls(
            code=ErrorCode.SERIES_EMPTY,
            message=f"Cannot {operation} on an empty series",
            context={"operation": operation},
        )

    @classmethod
    def length_mismatch(cls, expected: int, actual: int) -> InvalidArgumentError:
        """Paired inputs of different lengths."""
        return cls(
            code=ErrorCode.SERIES_LENGTH_MISMATCH,
            message=f"Length mismatch: expected {expected} items, got {actual}",
            context={"expected": expected, "actual": actual},
        )

    @classmethod
    def negative_parameter(cls, name: str, value: float) -> InvalidArgumentError:
        """Collector parameters must be non-negative."""
        return cls(
            code=ErrorCode.COLLECTOR_NEGATIVE_PARAMETER,
            message=f"{name} must be non-negative",
            context={"parameter": name, "value": value},
        )


@dataclass
class OutOfOrderError(InvalidArgumentError):
    """
    A direct assignment would break the non-decreasing timestamp invariant.
    """

    @classmethod
    def for_assignment(
        cls,
        index: int,
        timestamp: float,
        lower: float,
        upper: float,
    ) -> OutOfOrderError:
        """Record placed at index falls outside its neighbours."""
        return cls(
            code=ErrorCode.SERIES_OUT_OF_ORDER,
            message=(
                f"Cannot assign record at index {index} because its timestamp "
                f"{timestamp} is out of order {(lower, timestamp, upper)}. "
                "If order is not guaranteed, delete the index and push the record"
            ),
            context={"index": index, "timestamp": timestamp, "lower": lower, "upper": upper},
        )


# =============================================================================
# COLLECTOR / CONFIGURATION ERRORS
# =============================================================================
@dataclass
class CollectorError(TimeRecordsError):
    """Errors raised by the stream collector outside argument validation."""

    @classmethod
    def closed(cls) -> CollectorError:
        """Dispatch attempted after close()."""
        return cls(
            code=ErrorCode.COLLECTOR_CLOSED,
            message="Collector has been closed, no further callbacks can be dispatched",
        )


@dataclass
class ConfigurationError(TimeRecordsError):
    """Invalid configuration values."""

    @classmethod
    def invalid(cls, reason: str) -> ConfigurationError:
        """Environment loading or validation failed."""
        return cls(
            code=ErrorCode.INTERNAL_CONFIGURATION_ERROR,
            message=f"Invalid configuration: {reason}",
            context={"reason": reason},
        )
