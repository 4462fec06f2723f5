"""
System-Wide Constants for TimeRecords

All magic numbers and configuration defaults centralized here.
"""

from datetime import datetime, timezone
from typing import Final

# =============================================================================
# EPOCH
# =============================================================================
UNIX_EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=timezone.utc)

# =============================================================================
# INTERPOLATION / INTEGRATION
# =============================================================================
DEFAULT_ORDER: Final[int] = 0

# Weights used when both bracket records share a timestamp
COINCIDENT_WEIGHTS: Final[tuple[float, float]] = (0.5, 0.5)

# =============================================================================
# COLLECTOR
# =============================================================================
DEFAULT_COLLECTOR_INTERVAL_S: Final[float] = 1.0
DEFAULT_COLLECTOR_DELAY_S: Final[float] = 0.0
DEFAULT_COLLECTOR_WORKERS: Final[int] = 4

# =============================================================================
# ENVIRONMENT
# =============================================================================
ENV_PREFIX: Final[str] = "TIMERECORDS_"
