"""
Summary statistics over classified deviations.
"""

from dataclasses import dataclass, fields
from typing import Iterable

import pandas as pd

from .deviation import ClassifiedDeviation, TIER_L1, TIER_L2, TIER_L3


@dataclass(frozen=True)
class DeviationStatistics:
    """
    Counts and magnitudes for a window of classified deviations.

    Every field is a plain sum, so ``merge`` is commutative and associative
    and ``DeviationStatistics()`` is its identity. Partial summaries from
    chunks of a stream can be combined in any order.

    Attributes:
        total_observations: All deviations seen
        evaluated_observations: Deviations that had a forecast to compare with
        missing_forecasts: Deviations excluded because the forecast was unknown
        total_anomalies: Deviations with a tier other than none
        high_severity: Anomalies in tier L3
        medium_severity: Anomalies in tier L2
        low_severity: Anomalies in tier L1
        total_deviation_magnitude: Sum of |difference| over anomalies only
    """

    total_observations: int = 0
    evaluated_observations: int = 0
    missing_forecasts: int = 0
    total_anomalies: int = 0
    high_severity: int = 0
    medium_severity: int = 0
    low_severity: int = 0
    total_deviation_magnitude: float = 0.0

    @property
    def anomaly_rate(self) -> float:
        """Share of evaluated observations that are anomalies."""
        if self.evaluated_observations == 0:
            return 0.0
        return self.total_anomalies / self.evaluated_observations

    def merge(self, other: "DeviationStatistics") -> "DeviationStatistics":
        if not isinstance(other, DeviationStatistics):
            raise TypeError(
                f"Expected DeviationStatistics, got {type(other).__name__}"
            )
        return DeviationStatistics(
            **{
                f.name: getattr(self, f.name) + getattr(other, f.name)
                for f in fields(self)
            }
        )

    def __add__(self, other: "DeviationStatistics") -> "DeviationStatistics":
        if not isinstance(other, DeviationStatistics):
            return NotImplemented
        return self.merge(other)

    def to_dict(self) -> dict:
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["anomaly_rate"] = self.anomaly_rate
        return result


def _single(deviation: ClassifiedDeviation) -> DeviationStatistics:
    if not deviation.has_forecast:
        return DeviationStatistics(total_observations=1, missing_forecasts=1)

    anomalous = deviation.is_anomaly
    return DeviationStatistics(
        total_observations=1,
        evaluated_observations=1,
        total_anomalies=int(anomalous),
        high_severity=int(deviation.tier == TIER_L3),
        medium_severity=int(deviation.tier == TIER_L2),
        low_severity=int(deviation.tier == TIER_L1),
        total_deviation_magnitude=abs(deviation.difference) if anomalous else 0.0,
    )


def summarize(deviations: Iterable[ClassifiedDeviation]) -> DeviationStatistics:
    """Reduce classified deviations to a DeviationStatistics."""
    stats = DeviationStatistics()
    for deviation in deviations:
        stats = stats.merge(_single(deviation))
    return stats


def summarize_frame(df: pd.DataFrame) -> DeviationStatistics:
    """
    Reduce a detector result DataFrame to a DeviationStatistics.

    Args:
        df: DataFrame with at least 'tier', 'is_anomaly' and 'difference'
            columns; 'has_forecast' is optional and defaults to True

    Raises:
        TypeError: If df is not a DataFrame
        ValueError: If a required column is missing
    """
    if not isinstance(df, pd.DataFrame):
        raise TypeError(f"Expected pandas DataFrame, got {type(df).__name__}")

    if df.empty:
        return DeviationStatistics()

    missing = {"tier", "is_anomaly", "difference"} - set(df.columns)
    if missing:
        raise ValueError(
            f"Required columns not found in DataFrame: {sorted(missing)}. "
            f"Available columns: {list(df.columns)}"
        )

    if "has_forecast" in df.columns:
        has_forecast = df["has_forecast"].fillna(False).astype(bool)
    else:
        has_forecast = pd.Series(True, index=df.index)

    evaluated = df[has_forecast]
    anomalies = evaluated[evaluated["is_anomaly"].astype(bool)]

    return DeviationStatistics(
        total_observations=len(df),
        evaluated_observations=len(evaluated),
        missing_forecasts=int((~has_forecast).sum()),
        total_anomalies=len(anomalies),
        high_severity=int((anomalies["tier"] == TIER_L3).sum()),
        medium_severity=int((anomalies["tier"] == TIER_L2).sum()),
        low_severity=int((anomalies["tier"] == TIER_L1).sum()),
        total_deviation_magnitude=float(anomalies["difference"].abs().sum()),
    )
