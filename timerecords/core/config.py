"""
Configuration Management for TimeRecords

Provides validated configuration with sensible defaults.
Supports environment variable overrides.

Design:
- Immutable after construction
- from_env/validate report failures as Result values; load() raises
- Type-safe with dataclasses
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from timerecords.core.errors import ConfigurationError
from timerecords.core.types import Result, Ok, Err, Order
from timerecords.core import constants as C


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env(name: str, default: str) -> str:
    return os.getenv(f"{C.ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: bool) -> bool:
    raw = _env(name, "true" if default else "false").strip().lower()
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ValueError(f"{C.ENV_PREFIX}{name} must be a boolean, got {raw!r}")


@dataclass(frozen=True)
class InterpolationConfig:
    """Defaults for interpolation queries."""

    default_order: int = C.DEFAULT_ORDER

    @property
    def order(self) -> Order:
        """default_order as an Order (raises InvalidArgumentError if unsupported)."""
        return Order.parse(self.default_order)


@dataclass(frozen=True)
class IntegrationConfig:
    """
    Extrapolation warning policy for integrals.

    Integrating outside the recorded history holds the nearest edge
    value; these flags decide when that is reported.
    """

    warn_before: bool = True
    warn_after_hold: bool = False
    warn_after_linear: bool = True


@dataclass(frozen=True)
class CollectorConfig:
    """Stream collector window configuration (seconds)."""

    interval: float = C.DEFAULT_COLLECTOR_INTERVAL_S
    delay: float = C.DEFAULT_COLLECTOR_DELAY_S
    max_workers: int = C.DEFAULT_COLLECTOR_WORKERS
    warn_unknown_tags: bool = False


@dataclass(frozen=True)
class ObservabilityConfig:
    """Logging configuration."""

    log_level: str = "INFO"
    log_json: bool = True


@dataclass(frozen=True)
class TimeRecordsConfig:
    """Root configuration."""

    interpolation: InterpolationConfig = field(default_factory=InterpolationConfig)
    integration: IntegrationConfig = field(default_factory=IntegrationConfig)
    collector: CollectorConfig = field(default_factory=CollectorConfig)
    observability: ObservabilityConfig = field(default_factory=ObservabilityConfig)

    @classmethod
    def from_env(cls) -> Result[TimeRecordsConfig, str]:
        """
        Load configuration from environment variables.

        Environment variables are prefixed with TIMERECORDS_.
        Example: TIMERECORDS_COLLECTOR_INTERVAL, TIMERECORDS_LOG_LEVEL
        """
        try:
            interpolation = InterpolationConfig(
                default_order=int(_env("DEFAULT_ORDER", str(C.DEFAULT_ORDER))),
            )

            integration = IntegrationConfig(
                warn_before=_env_bool("WARN_BEFORE", True),
                warn_after_hold=_env_bool("WARN_AFTER_HOLD", False),
                warn_after_linear=_env_bool("WARN_AFTER_LINEAR", True),
            )

            collector = CollectorConfig(
                interval=float(_env("COLLECTOR_INTERVAL", str(C.DEFAULT_COLLECTOR_INTERVAL_S))),
                delay=float(_env("COLLECTOR_DELAY", str(C.DEFAULT_COLLECTOR_DELAY_S))),
                max_workers=int(_env("COLLECTOR_MAX_WORKERS", str(C.DEFAULT_COLLECTOR_WORKERS))),
                warn_unknown_tags=_env_bool("COLLECTOR_WARN_UNKNOWN_TAGS", False),
            )

            observability = ObservabilityConfig(
                log_level=_env("LOG_LEVEL", "INFO").upper(),
                log_json=_env_bool("LOG_JSON", True),
            )

            return Ok(cls(
                interpolation=interpolation,
                integration=integration,
                collector=collector,
                observability=observability,
            ))
        except (ValueError, TypeError) as e:
            return Err(f"Configuration error: {e}")

    @classmethod
    def load(cls) -> TimeRecordsConfig:
        """
        from_env() followed by validate().

        Raises:
            ConfigurationError: if either step fails
        """
        result = cls.from_env().flat_map(lambda config: config.validate().map(lambda _: config))
        if result.is_err():
            raise ConfigurationError.invalid(result.error)
        return result.unwrap()

    def validate(self) -> Result[None, str]:
        """Validate configuration invariants."""
        if self.interpolation.default_order not in (Order.HOLD, Order.LINEAR):
            return Err("default_order must be 0 (hold) or 1 (linear)")
        if self.collector.interval < 0:
            return Err("Collector interval must be non-negative")
        if self.collector.delay < 0:
            return Err("Collector delay must be non-negative")
        if self.collector.max_workers < 1:
            return Err("Collector max_workers must be >= 1")
        if self.observability.log_level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return Err(f"Unknown log level {self.observability.log_level!r}")
        return Ok(None)
