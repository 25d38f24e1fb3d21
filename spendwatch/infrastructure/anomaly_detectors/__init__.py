"""
Anomaly detection components.
"""

from .base import AnomalyDetector
from .forecast_actual import ForecastActualDeviationDetector

__all__ = ["AnomalyDetector", "ForecastActualDeviationDetector"]
