"""
Pairing of performance observations with their forecasts.
"""

import os
import warnings
from typing import Iterable, List, Optional, Tuple

from .deviation import (
    ClassifiedDeviation,
    DEFAULT_THRESHOLDS,
    ThresholdSet,
    classify,
)
from .observations import ForecastObservation, PerformanceObservation

MISSING_FORECAST_ZERO = "zero"
MISSING_FORECAST_UNKNOWN = "unknown"
MISSING_FORECAST_POLICIES = (MISSING_FORECAST_ZERO, MISSING_FORECAST_UNKNOWN)


def validate_missing_forecast_policy(policy: str) -> str:
    if policy not in MISSING_FORECAST_POLICIES:
        raise ValueError(
            f"Invalid missing_forecast policy: '{policy}'. "
            f"Must be one of: {list(MISSING_FORECAST_POLICIES)}"
        )
    return policy


def missing_forecast_policy_from_env(default: str = MISSING_FORECAST_ZERO) -> str:
    """Read SPENDWATCH_MISSING_FORECAST, falling back to ``default``."""
    policy = os.getenv("SPENDWATCH_MISSING_FORECAST", "").strip().lower() or default
    return validate_missing_forecast_policy(policy)


def index_forecasts(forecasts: Iterable[ForecastObservation]) -> dict:
    """
    Index forecasts by (entity_id, timestamp).

    When the same key appears more than once, the last forecast wins and a
    UserWarning names the number of duplicates.
    """
    index = {}
    duplicates = 0
    for forecast in forecasts:
        if forecast.key in index:
            duplicates += 1
        index[forecast.key] = forecast

    if duplicates:
        warnings.warn(
            f"Found {duplicates} duplicate forecast(s) for the same entity and "
            f"timestamp; keeping the last one for each.",
            UserWarning,
        )
    return index


def match_observations(
    performances: Iterable[PerformanceObservation],
    forecasts: Iterable[ForecastObservation],
) -> List[Tuple[PerformanceObservation, Optional[ForecastObservation]]]:
    """
    Pair each performance observation with the forecast sharing its entity
    and exact timestamp. Unmatched observations are paired with None.

    Output order follows ``performances``.
    """
    index = index_forecasts(forecasts)
    return [
        (performance, index.get((performance.entity_id, performance.timestamp)))
        for performance in performances
    ]


def classify_pair(
    performance: PerformanceObservation,
    forecast: Optional[ForecastObservation],
    thresholds: ThresholdSet = DEFAULT_THRESHOLDS,
    missing_forecast: str = MISSING_FORECAST_ZERO,
    negative_spend: str = "accept",
) -> ClassifiedDeviation:
    """
    Classify one matched pair, applying the missing-forecast policy.

    Under the 'zero' policy an absent forecast counts as 0 spend, so the
    observation can never be an anomaly. Under 'unknown' it is marked as
    having no forecast instead.
    """
    validate_missing_forecast_policy(missing_forecast)

    if forecast is None and missing_forecast == MISSING_FORECAST_UNKNOWN:
        # Run the checks on actual spend even though nothing is compared.
        checked = classify(
            performance.actual_spend, 0, thresholds, negative_spend=negative_spend
        )
        return ClassifiedDeviation.without_forecast(
            checked.actual_spend,
            entity_id=performance.entity_id,
            timestamp=performance.timestamp,
        )

    forecast_spend = forecast.forecast_spend if forecast is not None else 0
    return classify(
        performance.actual_spend,
        forecast_spend,
        thresholds,
        entity_id=performance.entity_id,
        timestamp=performance.timestamp,
        negative_spend=negative_spend,
    )


def classify_observations(
    performances: Iterable[PerformanceObservation],
    forecasts: Iterable[ForecastObservation],
    thresholds: ThresholdSet = DEFAULT_THRESHOLDS,
    missing_forecast: str = MISSING_FORECAST_ZERO,
    negative_spend: str = "accept",
) -> List[ClassifiedDeviation]:
    """Match and classify every performance observation, in input order."""
    validate_missing_forecast_policy(missing_forecast)
    return [
        classify_pair(
            performance,
            forecast,
            thresholds,
            missing_forecast=missing_forecast,
            negative_spend=negative_spend,
        )
        for performance, forecast in match_observations(performances, forecasts)
    ]
