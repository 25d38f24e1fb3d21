"""
Pure deviation classification, matching and statistics.
"""

from .deviation import (
    ClassifiedDeviation,
    DEFAULT_THRESHOLDS,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    TIER_L1,
    TIER_L2,
    TIER_L3,
    TIER_NONE,
    TIER_ORDER,
    ThresholdSet,
    classify,
    percentage_difference,
    tier_rank,
)
from .matching import (
    MISSING_FORECAST_UNKNOWN,
    MISSING_FORECAST_ZERO,
    classify_observations,
    classify_pair,
    match_observations,
)
from .observations import ForecastObservation, PerformanceObservation
from .statistics import DeviationStatistics, summarize, summarize_frame

__all__ = [
    "ClassifiedDeviation",
    "DEFAULT_THRESHOLDS",
    "DeviationStatistics",
    "ForecastObservation",
    "MISSING_FORECAST_UNKNOWN",
    "MISSING_FORECAST_ZERO",
    "PerformanceObservation",
    "SEVERITY_HIGH",
    "SEVERITY_LOW",
    "SEVERITY_MEDIUM",
    "TIER_L1",
    "TIER_L2",
    "TIER_L3",
    "TIER_NONE",
    "TIER_ORDER",
    "ThresholdSet",
    "classify",
    "classify_observations",
    "classify_pair",
    "match_observations",
    "percentage_difference",
    "summarize",
    "summarize_frame",
    "tier_rank",
]
