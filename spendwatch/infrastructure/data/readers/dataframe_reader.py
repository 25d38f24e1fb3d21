"""
In-memory DataFrame data reader implementation.
"""

import pandas as pd
from typing import Optional, Dict, List, Callable
from .base import DataReader
from spendwatch.shared import TransformableMixin


class DataFrameDataReader(DataReader, TransformableMixin):
    """
    Wraps an in-memory DataFrame in the DataReader interface.

    Useful for feeding observations that are already loaded (or built in a
    test) into a workflow.

    Args:
        dataframe: The pandas DataFrame to wrap
        transformers: Optional dict of transformer lists to apply after loading data
                     Example: {'after': [ValueFilter('entity_id', values=[1, 2])]}
    """

    def __init__(
        self,
        dataframe: pd.DataFrame,
        transformers: Optional[Dict[str, List[Callable]]] = None
    ):
        if not isinstance(dataframe, pd.DataFrame):
            raise TypeError(
                f"Expected pandas DataFrame, got {type(dataframe).__name__}"
            )

        self._dataframe: pd.DataFrame = dataframe.copy()
        self.transformers: dict[str, list[Callable]] = transformers or {}

    def load(self) -> pd.DataFrame:
        """
        Return a copy of the stored DataFrame with transformers applied.

        Returns:
            pd.DataFrame: The stored data
        """
        df = self._dataframe.copy()
        return self._apply_transformers(df, 'after')
