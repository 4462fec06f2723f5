"""
Core module: Type definitions, error hierarchy, and configuration.

This module provides the foundations shared by every other package:
- Result/Either monads for configuration loading
- Order enumeration and the MISSING sentinel
- Error hierarchy with codes and factory methods
- Configuration management with validation
"""

from timerecords.core.types import (
    Result,
    Ok,
    Err,
    Order,
    MISSING,
    MissingType,
    is_missing,
)
from timerecords.core.errors import (
    ErrorCode,
    TimeRecordsError,
    InvalidArgumentError,
    OutOfOrderError,
    CollectorError,
    ConfigurationError,
)
from timerecords.core.config import (
    TimeRecordsConfig,
    InterpolationConfig,
    IntegrationConfig,
    CollectorConfig,
    ObservabilityConfig,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "Order",
    "MISSING",
    "MissingType",
    "is_missing",
    "ErrorCode",
    "TimeRecordsError",
    "InvalidArgumentError",
    "OutOfOrderError",
    "CollectorError",
    "ConfigurationError",
    "TimeRecordsConfig",
    "InterpolationConfig",
    "IntegrationConfig",
    "CollectorConfig",
    "ObservabilityConfig",
]
