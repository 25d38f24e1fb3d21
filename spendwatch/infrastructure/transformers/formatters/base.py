"""
Base class for DataFrame formatters.
"""

from abc import ABC, abstractmethod
import pandas as pd


class DataFrameFormatter(ABC):
    """
    Abstract base class for DataFrame formatters.

    Formatters reshape or restyle a DataFrame's columns for the next
    consumer (a writer, a notifier or a report).
    """

    @abstractmethod
    def format(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Format a DataFrame.

        Args:
            df: Input DataFrame

        Returns:
            pd.DataFrame: Formatted DataFrame
        """
        pass
