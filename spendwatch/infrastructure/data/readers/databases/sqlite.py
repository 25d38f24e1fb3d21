"""
SQLite data reader implementation.
"""

import logging
import pandas as pd
import sqlite3
import os
import re
from datetime import date, datetime
from typing import Optional, Dict, Any, List, Callable, Union
from ..base import DataReader
from .queries import build_observation_query
from spendwatch.shared import DataFetchError, TransformableMixin

logger = logging.getLogger(__name__)


class SQLiteDataReader(DataReader, TransformableMixin):
    """
    Data reader implementation for SQLite databases.

    Args:
        database_path: Path to the SQLite database file
        query: SQL SELECT to execute; may contain named (:name) or qmark (?)
            placeholders
        params: Values for the query placeholders (optional)
        date_column: Name of the date column (will be parsed as datetime)
        transformers: Optional dict of transformer lists to apply after loading data
        **kwargs: Additional arguments to pass to pandas.read_sql_query()

    Security Notes:
        - Only single SELECT statements without SQL comments are accepted.
        - Pass user input through ``params``, never by formatting it into
          ``query``. ``for_observations()`` does this for you.
    """

    def __init__(
        self,
        database_path: str,
        query: str,
        params: Optional[Union[Dict[str, Any], List[Any]]] = None,
        date_column: Optional[str] = None,
        transformers: Optional[Dict[str, List[Callable]]] = None,
        **kwargs: Any
    ):
        if not database_path:
            raise ValueError("database_path cannot be empty")

        abs_path = os.path.abspath(database_path)

        if not os.path.isfile(abs_path):
            raise FileNotFoundError(
                f"Database file not found: {abs_path}"
            )

        if not os.access(abs_path, os.R_OK):
            raise PermissionError(
                f"Database file is not readable: {abs_path}"
            )

        self.database_path = abs_path

        if not query or not query.strip():
            raise ValueError("Query cannot be empty")

        self._validate_query(query)
        self.query = query
        self.params = params

        self.date_column = date_column
        self.transformers = transformers or {}
        self.read_sql_kwargs = kwargs

    @classmethod
    def for_observations(
        cls,
        database_path: str,
        table: str,
        columns: Optional[List[str]] = None,
        entity_column: str = "entity_id",
        timestamp_column: str = "timestamp",
        entity_id: Any = None,
        start: Any = None,
        end: Any = None,
        transformers: Optional[Dict[str, List[Callable]]] = None,
    ) -> "SQLiteDataReader":
        """
        Reader for an observation table filtered by entity and time range.

        Datetime bounds are sent as 'YYYY-MM-DD HH:MM:SS' text, the format
        SQLite's own date functions produce; string bounds are sent as given.

        Example:
            performance_reader = SQLiteDataReader.for_observations(
                'ads.db', 'ad_spend_metrics',
                columns=['campaign_id', 'timestamp', 'spend'],
                entity_column='campaign_id',
                entity_id=7,
                start='2024-03-01 00:00:00',
                end='2024-03-01 23:00:00',
            )
        """
        query, params = build_observation_query(
            table,
            columns=columns,
            entity_column=entity_column,
            timestamp_column=timestamp_column,
            entity_id=entity_id,
            start=start,
            end=end,
            placeholder=":{}",
        )
        for key in ("start", "end"):
            if isinstance(params.get(key), (datetime, date)):
                params[key] = pd.Timestamp(params[key]).strftime("%Y-%m-%d %H:%M:%S")

        return cls(
            database_path,
            query,
            params=params,
            date_column=timestamp_column,
            transformers=transformers,
        )

    def _validate_query(self, query: str) -> None:
        """
        Validate SQL query for obvious injection attempts.

        Raises:
            ValueError: If query contains suspicious patterns
        """
        query_lower = query.lower()

        if query.count(';') > 1 or ';' in query.rstrip('; \t\n'):
            raise ValueError(
                "Query contains multiple statements. "
                "Only single SQL statements are allowed."
            )

        query_check = query_lower.rstrip('; \t\n')

        if '--' in query_check or '/*' in query_check:
            raise ValueError(
                "SQL comments are not allowed in queries for security reasons"
            )

        if not re.match(r'^\s*(select|with)\b', query_lower):
            raise ValueError("Only SELECT queries are allowed.")

        dangerous_keywords = ['drop', 'delete', 'truncate', 'alter', 'create', 'insert', 'update']
        for keyword in dangerous_keywords:
            if re.search(r'\b' + keyword + r'\b', query_lower):
                raise ValueError(
                    f"Query contains potentially dangerous keyword: {keyword}."
                )

    def load(self) -> pd.DataFrame:
        """
        Load data from the SQLite database.

        Returns:
            pd.DataFrame: The loaded data

        Raises:
            DataFetchError: If the query fails
            ValueError: If date_column is missing or cannot be parsed
        """
        conn = None
        try:
            conn = sqlite3.connect(self.database_path)
            df = pd.read_sql_query(
                self.query, conn, params=self.params, **self.read_sql_kwargs
            )
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise DataFetchError(
                f"SQLite query failed on '{self.database_path}': {str(e)}"
            ) from e
        finally:
            if conn is not None:
                conn.close()

        if self.date_column:
            if self.date_column not in df.columns:
                raise ValueError(
                    f"date_column '{self.date_column}' not found in query results. "
                    f"Available columns: {list(df.columns)}"
                )
            try:
                df[self.date_column] = pd.to_datetime(df[self.date_column])
            except Exception as e:
                raise ValueError(
                    f"Failed to parse date_column '{self.date_column}' "
                    f"as datetime: {str(e)}"
                ) from e

        logger.debug("Loaded %d rows from %s", len(df), self.database_path)

        return self._apply_transformers(df, 'after')
