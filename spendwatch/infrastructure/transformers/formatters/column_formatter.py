"""
Column formatter - applies formatting functions to columns.
"""

import pandas as pd
from typing import List, Union, Callable, Dict
from .base import DataFrameFormatter


class ColumnFormatter(DataFrameFormatter):
    """
    Apply per-column formatting functions.

    Args:
        formatters: Dict mapping column names to single-value functions

    Example - readable spend and deviation columns for a Slack message:
        formatter = ColumnFormatter({
            'actual_spend': lambda x: f"${x:,.2f}",
            'tier': lambda x: x.upper(),
        })

    Example - percentage helper:
        ColumnFormatter.percentage('percentage_difference', decimal_places=1)
        # 45.0 -> "45.0%"
    """

    def __init__(self, formatters: Dict[str, Callable]):
        if not formatters:
            raise ValueError("formatters dictionary cannot be empty")

        for column, func in formatters.items():
            if not callable(func):
                raise TypeError(
                    f"Formatter for column '{column}' must be callable, "
                    f"got {type(func).__name__}"
                )

        self.formatters: dict[str, Callable] = formatters

    @classmethod
    def percentage(
        cls,
        columns: Union[str, List[str]],
        decimal_places: int = 1,
        multiply_by_100: bool = False
    ) -> "ColumnFormatter":
        """
        Formatter rendering numeric columns as "12.3%".

        Args:
            columns: Column name or list of column names
            decimal_places: Number of decimal places (default: 1)
            multiply_by_100: Multiply by 100 first, for ratios (default: False)
        """
        if decimal_places < 0:
            raise ValueError(f"decimal_places must be non-negative, got {decimal_places}")

        column_list = [columns] if isinstance(columns, str) else columns

        def format_percentage(value):
            if pd.isna(value):
                return ""
            if multiply_by_100:
                value = value * 100
            return f"{value:.{decimal_places}f}%"

        return cls({col: format_percentage for col in column_list})

    @classmethod
    def currency(
        cls,
        columns: Union[str, List[str]],
        symbol: str = "$",
        decimal_places: int = 2
    ) -> "ColumnFormatter":
        """
        Formatter rendering spend columns as "$1,234.50".

        Args:
            columns: Column name or list of column names
            symbol: Currency symbol prefix (default: '$')
            decimal_places: Number of decimal places (default: 2)
        """
        if decimal_places < 0:
            raise ValueError(f"decimal_places must be non-negative, got {decimal_places}")

        column_list = [columns] if isinstance(columns, str) else columns

        def format_currency(value):
            if pd.isna(value):
                return ""
            sign = "-" if value < 0 else ""
            return f"{sign}{symbol}{abs(value):,.{decimal_places}f}"

        return cls({col: format_currency for col in column_list})

    def format(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Apply formatting functions to the columns that exist.

        Args:
            df: Input DataFrame

        Returns:
            pd.DataFrame: Formatted DataFrame
        """
        if df.empty:
            return df.copy()

        result = df.copy()

        for column, format_func in self.formatters.items():
            if column in result.columns:
                result[column] = result[column].apply(format_func)

        return result
