"""
Core Type Definitions for TimeRecords

Provides:
- Result/Either monads for configuration loading and validation
- Order: closed enumeration of two-point algorithms (hold / linear)
- MISSING: sentinel produced by strict interpolation outside a series

Design Principles:
- Algorithm selection is a tagged enumeration, never a bare integer
- Unsupported orders are rejected at the call boundary
- "I don't know" is a typed value, not None or NaN
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import (
    Any,
    Callable,
    Generic,
    Literal,
    TypeVar,
    Union,
)

from timerecords.core.errors import InvalidArgumentError

# =============================================================================
# TYPE VARIABLES FOR GENERIC CONTAINERS
# =============================================================================
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Transform result type


# =============================================================================
# RESULT MONAD
# =============================================================================
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """
    Success variant of Result monad.

    Immutable container for successful computation results.
    """

    value: T

    def is_ok(self) -> Literal[True]:
        return True

    def is_err(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """Extract value. Safe to call after is_ok() check."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Return value, ignoring default."""
        return self.value

    def map(self, fn: Callable[[T], U]) -> Ok[U]:
        """Apply transformation to success value."""
        return Ok(fn(self.value))

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Monadic bind for chaining fallible operations."""
        return fn(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """
    Failure variant of Result monad.

    Carries the error value for exhaustive handling.
    """

    error: E

    def is_ok(self) -> Literal[False]:
        return False

    def is_err(self) -> Literal[True]:
        return True

    def unwrap(self) -> Any:
        """
        Attempting to unwrap an error is a programming error.

        Raises:
            RuntimeError: Always, with error context
        """
        raise RuntimeError(f"Called unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Return default value on error."""
        return default

    def map(self, fn: Callable[[Any], U]) -> Err[E]:
        """No-op on error variant - propagates error unchanged."""
        return self

    def flat_map(self, fn: Callable[[Any], Result[U, E]]) -> Err[E]:
        """Propagate error through monadic chain."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Union type for pattern matching
Result = Union[Ok[T], Err[E]]


# =============================================================================
# ALGORITHM ORDER
# =============================================================================
class Order(IntEnum):
    """
    Two-point algorithm selection, shared by interpolation and integration.

    HOLD (0):   hold-last-value interpolation / Riemann integral
    LINEAR (1): saturated linear interpolation / trapezoidal integral

    Being an IntEnum, plain 0 and 1 are accepted wherever an Order is.
    """

    HOLD = 0
    LINEAR = 1

    @classmethod
    def parse(cls, value: Union[Order, int]) -> Order:
        """
        Validate an order argument.

        Raises:
            InvalidArgumentError: for anything other than 0 or 1
        """
        if isinstance(value, cls):
            return value
        # bool is an int subclass but never a meaningful order
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise InvalidArgumentError.unsupported_order(value)


# =============================================================================
# MISSING SENTINEL
# =============================================================================
class MissingType:
    """
    Singleton marking a value that cannot be known.

    Returned by strict interpolation for query times outside the
    series range. Falsy, hashable, and equal only to itself.
    """

    __slots__ = ()
    _instance: Any = None

    def __new__(cls) -> MissingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "missing"

    def __reduce__(self) -> str:
        return "MISSING"


MISSING = MissingType()


def is_missing(value: Any) -> bool:
    """Check whether a value is the MISSING sentinel."""
    return value is MISSING
