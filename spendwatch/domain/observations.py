"""
Input observation records.
"""

from dataclasses import dataclass
from typing import Any, Hashable


@dataclass(frozen=True)
class PerformanceObservation:
    """Actual spend of one entity in one time bucket."""

    entity_id: Hashable
    timestamp: Any
    actual_spend: float


@dataclass(frozen=True)
class ForecastObservation:
    """Forecast spend of one entity in one time bucket."""

    entity_id: Hashable
    timestamp: Any
    forecast_spend: float

    @property
    def key(self) -> tuple:
        return (self.entity_id, self.timestamp)
