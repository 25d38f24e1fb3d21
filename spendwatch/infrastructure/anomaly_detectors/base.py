"""
Base abstract class for anomaly detectors.
"""

from abc import ABC, abstractmethod
import pandas as pd


class AnomalyDetector(ABC):
    """
    Abstract base class for all anomaly detector implementations.

    All anomaly detector implementations must inherit from this class
    and implement the detect() method.
    """

    @abstractmethod
    def detect(
        self,
        performance_df: pd.DataFrame,
        forecast_df: pd.DataFrame
    ) -> pd.DataFrame:
        """
        Detect anomalies by comparing actual spend with its forecast.

        Args:
            performance_df: Actual spend observations
            forecast_df: Forecast spend observations

        Returns:
            pd.DataFrame: One classified row per performance observation
        """
        pass
