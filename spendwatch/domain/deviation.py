"""
Threshold-tiered deviation classification of actual vs forecast spend.
"""

import math
import numbers
import os
from dataclasses import dataclass
from typing import Any, Optional

TIER_NONE = "none"
TIER_L1 = "L1"
TIER_L2 = "L2"
TIER_L3 = "L3"

# Ascending order; index doubles as the tier rank.
TIER_ORDER = (TIER_NONE, TIER_L1, TIER_L2, TIER_L3)

SEVERITY_LOW = "low"
SEVERITY_MEDIUM = "medium"
SEVERITY_HIGH = "high"

TIER_SEVERITY = {
    TIER_NONE: SEVERITY_LOW,
    TIER_L1: SEVERITY_LOW,
    TIER_L2: SEVERITY_MEDIUM,
    TIER_L3: SEVERITY_HIGH,
}

NEGATIVE_SPEND_POLICIES = ("accept", "reject", "clamp")


def tier_rank(tier: str) -> int:
    """Return the position of ``tier`` in TIER_ORDER (none=0 ... L3=3)."""
    try:
        return TIER_ORDER.index(tier)
    except ValueError:
        raise ValueError(
            f"Unknown tier: '{tier}'. Must be one of: {list(TIER_ORDER)}"
        ) from None


@dataclass(frozen=True)
class ThresholdSet:
    """
    Three ascending percentage cutoffs for the L1, L2 and L3 tiers.

    Args:
        l1: Lowest cutoff in percent (default: 15)
        l2: Middle cutoff in percent (default: 30)
        l3: Highest cutoff in percent (default: 50)

    Raises:
        ValueError: If a cutoff is negative, non-finite or the cutoffs descend
    """

    l1: float = 15.0
    l2: float = 30.0
    l3: float = 50.0

    ENV_PREFIX = "SPENDWATCH_THRESHOLD_"

    def __post_init__(self):
        for name in ("l1", "l2", "l3"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise TypeError(
                    f"Threshold {name.upper()} must be a number, got {type(value).__name__}"
                )
            if not math.isfinite(value) or value < 0:
                raise ValueError(
                    f"Threshold {name.upper()} must be a non-negative finite number, got {value}"
                )
            object.__setattr__(self, name, float(value))

        if not self.l1 <= self.l2 <= self.l3:
            raise ValueError(
                f"Thresholds must be ascending (L1 <= L2 <= L3), "
                f"got L1={self.l1}, L2={self.l2}, L3={self.l3}"
            )

    @classmethod
    def from_env(cls) -> "ThresholdSet":
        """
        Build thresholds from SPENDWATCH_THRESHOLD_L1/L2/L3.

        Unset variables fall back to the defaults.
        """
        defaults = cls()
        values = {}
        for name in ("l1", "l2", "l3"):
            raw = os.getenv(f"{cls.ENV_PREFIX}{name.upper()}", "").strip()
            if not raw:
                values[name] = getattr(defaults, name)
                continue
            try:
                values[name] = float(raw)
            except ValueError:
                raise ValueError(
                    f"Invalid value for {cls.ENV_PREFIX}{name.upper()}: '{raw}'"
                ) from None
        return cls(**values)

    def tier_for(self, percentage_difference: float) -> str:
        """Highest tier whose cutoff is reached (comparisons are >=)."""
        if percentage_difference >= self.l3:
            return TIER_L3
        if percentage_difference >= self.l2:
            return TIER_L2
        if percentage_difference >= self.l1:
            return TIER_L1
        return TIER_NONE


DEFAULT_THRESHOLDS = ThresholdSet()


@dataclass(frozen=True)
class ClassifiedDeviation:
    """
    Result of comparing one actual spend value with its forecast.

    ``forecast_spend`` and ``difference`` are None only when the forecast was
    missing and treated as unknown (``has_forecast`` is False).
    """

    entity_id: Any
    timestamp: Any
    actual_spend: float
    forecast_spend: Optional[float]
    difference: Optional[float]
    percentage_difference: float
    tier: str
    severity: str
    is_anomaly: bool
    has_forecast: bool = True

    @classmethod
    def without_forecast(
        cls, actual_spend: float, entity_id: Any = None, timestamp: Any = None
    ) -> "ClassifiedDeviation":
        """Deviation for an observation whose forecast is unknown."""
        return cls(
            entity_id=entity_id,
            timestamp=timestamp,
            actual_spend=actual_spend,
            forecast_spend=None,
            difference=None,
            percentage_difference=0.0,
            tier=TIER_NONE,
            severity=TIER_SEVERITY[TIER_NONE],
            is_anomaly=False,
            has_forecast=False,
        )

    def to_dict(self) -> dict:
        return {
            "entity_id": self.entity_id,
            "timestamp": self.timestamp,
            "actual_spend": self.actual_spend,
            "forecast_spend": self.forecast_spend,
            "difference": self.difference,
            "percentage_difference": self.percentage_difference,
            "tier": self.tier,
            "severity": self.severity,
            "is_anomaly": self.is_anomaly,
            "has_forecast": self.has_forecast,
        }


def _check_spend(name: str, value: Any, negative_spend: str) -> float:
    # Decimal (NUMERIC columns) is a Number but not Real; complex is not spend
    if (
        isinstance(value, bool)
        or not isinstance(value, numbers.Number)
        or (isinstance(value, numbers.Complex) and not isinstance(value, numbers.Real))
    ):
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")

    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")

    if value < 0:
        if negative_spend == "reject":
            raise ValueError(f"{name} must be non-negative, got {value}")
        if negative_spend == "clamp":
            return 0.0

    return value


def percentage_difference(actual_spend: float, forecast_spend: float) -> float:
    """
    Absolute deviation as a percentage of the forecast.

    A zero (or negative) forecast yields 0, so spend against a zero forecast
    is never flagged.
    """
    if forecast_spend > 0:
        return abs(actual_spend - forecast_spend) * 100 / forecast_spend
    return 0.0


def classify(
    actual_spend: float,
    forecast_spend: float,
    thresholds: ThresholdSet = DEFAULT_THRESHOLDS,
    *,
    entity_id: Any = None,
    timestamp: Any = None,
    negative_spend: str = "accept",
) -> ClassifiedDeviation:
    """
    Classify one actual spend value against its forecast.

    Args:
        actual_spend: Observed spend
        forecast_spend: Forecast spend (0 when no forecast is available)
        thresholds: Tier cutoffs; their ordering is checked by ThresholdSet,
            not here
        entity_id: Carried through to the result
        timestamp: Carried through to the result
        negative_spend: 'accept' keeps negative values as given, 'reject'
            raises ValueError, 'clamp' treats them as 0

    Returns:
        ClassifiedDeviation: The classified result

    Raises:
        TypeError: If a spend value is not a number
        ValueError: If a spend value is NaN or infinite, or negative under
            the 'reject' policy
    """
    if negative_spend not in NEGATIVE_SPEND_POLICIES:
        raise ValueError(
            f"Invalid negative_spend policy: '{negative_spend}'. "
            f"Must be one of: {list(NEGATIVE_SPEND_POLICIES)}"
        )

    actual = _check_spend("actual_spend", actual_spend, negative_spend)
    forecast = _check_spend("forecast_spend", forecast_spend, negative_spend)

    pct = percentage_difference(actual, forecast)
    tier = thresholds.tier_for(pct)

    return ClassifiedDeviation(
        entity_id=entity_id,
        timestamp=timestamp,
        actual_spend=actual,
        forecast_spend=forecast,
        difference=actual - forecast,
        percentage_difference=pct,
        tier=tier,
        severity=TIER_SEVERITY[tier],
        is_anomaly=tier != TIER_NONE,
    )
