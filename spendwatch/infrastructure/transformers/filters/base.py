"""
Base class for DataFrame filters.
"""

from abc import ABC, abstractmethod
import pandas as pd


class DataFrameFilter(ABC):
    """
    Abstract base class for DataFrame filters.

    Filters drop rows and may be attached to any component stage: after a
    reader loads observations, after detection, or before a writer or
    notifier receives the results.
    """

    @abstractmethod
    def filter(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Filter a DataFrame.

        Args:
            df: Input DataFrame

        Returns:
            pd.DataFrame: Filtered DataFrame
        """
        pass
