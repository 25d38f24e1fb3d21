"""
CSV data reader implementation.
"""

import logging
import pandas as pd
import os
from typing import Optional, Dict, Any, List, Callable
from ..base import DataReader
from spendwatch.shared import DataFetchError, TransformableMixin

logger = logging.getLogger(__name__)


class CSVDataReader(DataReader, TransformableMixin):
    """
    Data reader implementation for CSV exports of spend observations.

    Args:
        file_path: Path to the CSV file
        date_column: Name of the timestamp column (will be parsed as datetime)
        transformers: Optional dict of transformer lists to apply after loading data
        **kwargs: Additional arguments to pass to pandas.read_csv()
    """

    def __init__(
        self,
        file_path: str,
        date_column: Optional[str] = None,
        transformers: Optional[Dict[str, List[Callable]]] = None,
        **kwargs: Any
    ):
        if not file_path:
            raise ValueError("file_path cannot be empty")

        abs_path = os.path.abspath(file_path)

        if not os.path.isfile(abs_path):
            raise FileNotFoundError(
                f"CSV file not found: {abs_path}"
            )

        if not os.access(abs_path, os.R_OK):
            raise PermissionError(
                f"CSV file is not readable: {abs_path}"
            )

        self.file_path = abs_path
        self.date_column = date_column
        self.transformers = transformers or {}
        self.read_csv_kwargs = kwargs

    def load(self) -> pd.DataFrame:
        """
        Load data from the CSV file.

        Returns:
            pd.DataFrame: The loaded data

        Raises:
            DataFetchError: If the file cannot be read or parsed
            ValueError: If the file is empty or date_column is invalid
        """
        try:
            df = pd.read_csv(self.file_path, **self.read_csv_kwargs)
        except pd.errors.EmptyDataError as e:
            raise ValueError(f"CSV file is empty: {self.file_path}") from e
        except Exception as e:
            raise DataFetchError(
                f"Failed to read CSV file '{self.file_path}': {str(e)}"
            ) from e

        if df.empty:
            raise ValueError(
                f"CSV file is empty: {self.file_path}"
            )

        if self.date_column:
            if self.date_column not in df.columns:
                raise ValueError(
                    f"date_column '{self.date_column}' not found in CSV file. "
                    f"Available columns: {list(df.columns)}"
                )

            try:
                df[self.date_column] = pd.to_datetime(df[self.date_column])
            except Exception as e:
                raise ValueError(
                    f"Failed to parse date_column '{self.date_column}' as datetime: {str(e)}"
                ) from e

        logger.debug("Loaded %d rows from %s", len(df), self.file_path)

        return self._apply_transformers(df, 'after')
