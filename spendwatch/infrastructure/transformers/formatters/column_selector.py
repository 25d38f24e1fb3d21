"""
Column selector - keeps or drops columns.
"""

import pandas as pd
from typing import List, Union
from .base import DataFrameFormatter


class ColumnSelector(DataFrameFormatter):
    """
    Keep only, or drop, the given columns. Unknown names are ignored.

    Args:
        columns: Column name or list of column names
        mode: 'keep' or 'drop' (default: 'drop')

    Example - trim a result before posting to Slack:
        ColumnSelector(['entity_id', 'timestamp', 'tier', 'percentage_difference'], mode='keep')
    """

    def __init__(
        self,
        columns: Union[str, List[str]],
        mode: str = 'drop'
    ):
        if mode not in ['keep', 'drop']:
            raise ValueError(
                f"mode must be 'keep' or 'drop', got '{mode}'"
            )

        if isinstance(columns, str):
            self.columns = [columns]
        elif isinstance(columns, list):
            self.columns = list(columns)
        else:
            raise TypeError(
                f"columns must be a string or list of strings, got {type(columns).__name__}"
            )

        if not self.columns:
            raise ValueError("columns list cannot be empty")

        self.mode = mode

    def format(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Select or drop columns.

        Args:
            df: Input DataFrame

        Returns:
            pd.DataFrame: DataFrame with the selected columns, in the order given
        """
        if self.mode == 'drop':
            columns_to_drop = [col for col in self.columns if col in df.columns]
            return df.drop(columns=columns_to_drop).copy()

        columns_to_keep = [col for col in self.columns if col in df.columns]
        if not columns_to_keep:
            return pd.DataFrame(index=df.index)

        return df[columns_to_keep].copy()
