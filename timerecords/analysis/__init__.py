"""
Analysis Module: Interpolation and Integration

Provides:
- Interpolation: hold-last / linear two-point algorithms, strict variant, merge
- Aggregation: integrate, average, accumulate, extrema, regularize
"""

from timerecords.analysis.interpolation import (
    interpolate,
    strictinterp,
    interpolate_records,
    hold_last,
    linear,
    linear_weights,
    merge,
)
from timerecords.analysis.aggregation import (
    ExtrapolationPolicy,
    DEFAULT_POLICY,
    integrate,
    integrate_records,
    average,
    aggregate,
    accumulate,
    maximum,
    minimum,
    regularize,
    riemann,
    trapezoid,
)

__all__ = [
    # Interpolation
    "interpolate",
    "strictinterp",
    "interpolate_records",
    "hold_last",
    "linear",
    "linear_weights",
    "merge",
    # Aggregation
    "ExtrapolationPolicy",
    "DEFAULT_POLICY",
    "integrate",
    "integrate_records",
    "average",
    "aggregate",
    "accumulate",
    "maximum",
    "minimum",
    "regularize",
    "riemann",
    "trapezoid",
]
