"""
SQLite data writer implementation.
"""

import logging
import pandas as pd
import sqlite3
import os
from typing import Optional, Dict, List, Callable
from ..base import DataWriter
from spendwatch.infrastructure.data.readers.databases.queries import validate_identifier
from spendwatch.shared import DataWriteError, TransformableMixin

logger = logging.getLogger(__name__)


class SQLiteDataWriter(DataWriter, TransformableMixin):
    """
    Data writer implementation for SQLite databases.

    Defaults to appending, which is how anomaly records are kept: an
    append-only history.

    Args:
        database_path: Path to the SQLite database file (created if missing)
        table_name: Name of the table to write to
        if_exists: How to behave if table exists {'fail', 'replace', 'append'}
                   (default: 'append')
        transformers: Optional dict of transformer lists to apply before writing data
                     Example: {'before': [AnomalyRecordFormatter(directory)]}
        **kwargs: Additional arguments to pass to pandas.to_sql()
    """

    VALID_IF_EXISTS = ['fail', 'replace', 'append']
    SQL_KEYWORDS = {'select', 'insert', 'update', 'delete', 'drop', 'create', 'alter'}

    def __init__(
        self,
        database_path: str,
        table_name: str,
        if_exists: str = 'append',
        transformers: Optional[Dict[str, List[Callable]]] = None,
        **kwargs
    ):
        if not database_path:
            raise ValueError("database_path cannot be empty")

        abs_path = os.path.abspath(database_path)

        parent_dir = os.path.dirname(abs_path)
        if not os.path.exists(parent_dir):
            raise FileNotFoundError(
                f"Parent directory does not exist: {parent_dir}"
            )

        if not os.access(parent_dir, os.W_OK):
            raise PermissionError(
                f"Parent directory is not writable: {parent_dir}"
            )

        self.database_path = abs_path

        validate_identifier(table_name, "table_name")
        if table_name.lower() in self.SQL_KEYWORDS:
            raise ValueError(
                f"table_name cannot be a SQL keyword: '{table_name}'"
            )
        self.table_name = table_name

        if if_exists not in self.VALID_IF_EXISTS:
            raise ValueError(
                f"Invalid if_exists value: '{if_exists}'. "
                f"Must be one of: {self.VALID_IF_EXISTS}"
            )

        self.if_exists = if_exists
        self.transformers = transformers or {}
        self.to_sql_kwargs = kwargs

    def write(self, dataframe: pd.DataFrame) -> None:
        """
        Write a DataFrame to the SQLite table.

        An empty DataFrame (for example, no anomalies left after the
        'before' transformers) is skipped.

        Args:
            dataframe: The data to write

        Raises:
            TypeError: If dataframe is not a DataFrame
            DataWriteError: If the database write fails
        """
        if not isinstance(dataframe, pd.DataFrame):
            raise TypeError(
                f"Expected pandas DataFrame, got {type(dataframe).__name__}"
            )

        dataframe = self._apply_transformers(dataframe, 'before')

        if dataframe.empty:
            logger.debug("Nothing to write to table '%s'", self.table_name)
            return

        conn = None
        try:
            conn = sqlite3.connect(self.database_path)

            dataframe.to_sql(
                name=self.table_name,
                con=conn,
                if_exists=self.if_exists,
                index=False,
                **self.to_sql_kwargs
            )
            conn.commit()

        except (sqlite3.Error, ValueError) as e:
            raise DataWriteError(
                f"SQLite database error while writing to table '{self.table_name}': {str(e)}"
            ) from e
        finally:
            if conn is not None:
                conn.close()

        logger.debug("Wrote %d rows to table '%s'", len(dataframe), self.table_name)
