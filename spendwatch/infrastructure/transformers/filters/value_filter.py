"""
Value filter - keeps rows by categorical values and/or numeric bounds.
"""

import pandas as pd
from typing import Any, List, Union, Optional
from .base import DataFrameFilter


class ValueFilter(DataFrameFilter):
    """
    Filter DataFrame rows on one column.

    Categorical values (include or exclude mode) and numeric min/max bounds
    can be combined; the categorical filter runs first.

    Args:
        column: Column name to filter on
        values: Value or list of values to keep/exclude (optional)
        mode: 'include' to keep matching rows, 'exclude' to remove them (default: 'include')
        min_value: Minimum value (inclusive), None for no minimum (optional)
        max_value: Maximum value (inclusive), None for no maximum (optional)

    Example - only L2 and L3 deviations:
        ValueFilter('tier', values=['L2', 'L3'])

    Example - drop a test campaign:
        ValueFilter('entity_id', values=[999], mode='exclude')

    Example - deviations of at least 20%:
        ValueFilter('percentage_difference', min_value=20.0)
    """

    def __init__(
        self,
        column: str,
        values: Optional[Union[Any, List[Any]]] = None,
        mode: str = 'include',
        min_value: Optional[float] = None,
        max_value: Optional[float] = None
    ):
        if not column:
            raise ValueError("column cannot be empty")

        if values is None and min_value is None and max_value is None:
            raise ValueError("At least one of 'values', 'min_value', or 'max_value' must be specified")

        if mode not in ['include', 'exclude']:
            raise ValueError(f"mode must be 'include' or 'exclude', got {mode}")

        if min_value is not None and max_value is not None and min_value > max_value:
            raise ValueError(
                f"min_value ({min_value}) cannot be greater than max_value ({max_value})"
            )

        self.column = column
        self.values = values if values is None else (values if isinstance(values, list) else [values])
        self.mode = mode
        self.min_value = min_value
        self.max_value = max_value

    def filter(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Filter DataFrame by column values and/or numeric bounds.

        A missing column leaves the DataFrame unchanged.

        Args:
            df: Input DataFrame

        Returns:
            pd.DataFrame: Filtered DataFrame
        """
        if df.empty or self.column not in df.columns:
            return df.copy()

        result = df.copy()

        if self.values is not None:
            mask = result[self.column].isin(self.values)
            result = result[mask] if self.mode == 'include' else result[~mask]

        if self.min_value is not None:
            result = result[result[self.column] >= self.min_value]

        if self.max_value is not None:
            result = result[result[self.column] <= self.max_value]

        return result
