"""
BigQuery data reader implementation.
"""

import logging
import numbers
import pandas as pd
import os
from datetime import date, datetime
from typing import Any, Optional, Dict, List, Callable
from google.cloud import bigquery
from google.oauth2 import service_account
from ..base import DataReader
from .queries import build_observation_query
from spendwatch.shared import DataFetchError, TransformableMixin

logger = logging.getLogger(__name__)


def _query_parameter(name: str, value: Any):
    """Typed BigQuery query parameter for an entity id or a time bound."""
    if isinstance(value, (datetime, date, pd.Timestamp)):
        timestamp = pd.Timestamp(value)
        if timestamp.tzinfo is None:
            timestamp = timestamp.tz_localize("UTC")
        return bigquery.ScalarQueryParameter(name, "TIMESTAMP", timestamp.to_pydatetime())
    if isinstance(value, bool):
        return bigquery.ScalarQueryParameter(name, "BOOL", value)
    # numpy scalars taken from a DataFrame are Integral/Real but not int/float
    if isinstance(value, numbers.Integral):
        return bigquery.ScalarQueryParameter(name, "INT64", int(value))
    if isinstance(value, numbers.Real):
        return bigquery.ScalarQueryParameter(name, "FLOAT64", float(value))
    return bigquery.ScalarQueryParameter(name, "STRING", str(value))


class BigQueryDataReader(DataReader, TransformableMixin):
    """
    Data reader implementation for Google BigQuery.

    Args:
        service_account_file: Path to the service account JSON file
        project: GCP project ID
        query: SQL query to execute; may reference @named parameters
        date_column: Name of the date column (required, will be parsed as datetime)
        query_parameters: Optional mapping of parameter name to value
        transformers: Optional dict of transformer lists to apply after loading data

    Security Notes:
        - Pass user input through ``query_parameters`` rather than formatting
          it into ``query``. ``for_observations()`` does this for you.
    """

    def __init__(
        self,
        service_account_file: str,
        project: str,
        query: str,
        date_column: str,
        query_parameters: Optional[Dict[str, Any]] = None,
        transformers: Optional[Dict[str, List[Callable]]] = None,
    ):
        if not service_account_file or not service_account_file.strip():
            raise ValueError("'service_account_file' cannot be empty")

        abs_path = os.path.abspath(service_account_file)
        if not os.path.isfile(abs_path):
            raise FileNotFoundError(f"'service_account_file' not found: {abs_path}")

        if not os.access(abs_path, os.R_OK):
            raise PermissionError(f"'service_account_file' is not readable: {abs_path}")

        if not abs_path.endswith(".json"):
            raise ValueError(
                "'service_account_file' must be a JSON file (.json extension)"
            )
        self.service_account_file = abs_path

        if not project or not project.strip():
            raise ValueError("'project' cannot be empty")
        self.project = project

        if not query or not query.strip():
            raise ValueError("'query' cannot be empty")
        self.query = query

        if not date_column or not date_column.strip():
            raise ValueError("'date_column' cannot be empty")
        self.date_column = date_column

        self.query_parameters = dict(query_parameters or {})
        self._client = None
        self.transformers = transformers or {}

    @classmethod
    def for_observations(
        cls,
        service_account_file: str,
        project: str,
        table: str,
        columns: Optional[List[str]] = None,
        entity_column: str = "entity_id",
        timestamp_column: str = "timestamp",
        entity_id: Any = None,
        start: Any = None,
        end: Any = None,
        transformers: Optional[Dict[str, List[Callable]]] = None,
    ) -> "BigQueryDataReader":
        """
        Reader for an observation table ('dataset.table' or
        'project.dataset.table') filtered by entity and time range.
        """
        query, params = build_observation_query(
            table,
            columns=columns,
            entity_column=entity_column,
            timestamp_column=timestamp_column,
            entity_id=entity_id,
            start=start,
            end=end,
            placeholder="@{}",
            quote="`",
            allow_dotted=True,
        )
        for key in ("start", "end"):
            if isinstance(params.get(key), str):
                params[key] = pd.Timestamp(params[key])

        return cls(
            service_account_file,
            project,
            query,
            date_column=timestamp_column,
            query_parameters=params,
            transformers=transformers,
        )

    def _get_client(self) -> bigquery.Client:
        """
        Create and return BigQuery client.

        Returns:
            bigquery.Client: Initialized BigQuery client
        """
        if self._client is None:
            try:
                credentials = service_account.Credentials.from_service_account_file(
                    self.service_account_file
                )

                self._client = bigquery.Client(
                    credentials=credentials, project=self.project
                )
            except Exception as e:
                raise DataFetchError(f"Failed to create BigQuery client: {str(e)}") from e

        return self._client

    def _job_config(self) -> Optional[bigquery.QueryJobConfig]:
        if not self.query_parameters:
            return None
        return bigquery.QueryJobConfig(
            query_parameters=[
                _query_parameter(name, value)
                for name, value in self.query_parameters.items()
            ]
        )

    def load(self) -> pd.DataFrame:
        """
        Load data from BigQuery using the provided query.

        Returns:
            pd.DataFrame: The loaded data (may be empty)

        Raises:
            DataFetchError: If the BigQuery query fails
            ValueError: If date_column is missing or cannot be parsed
        """
        try:
            client = self._get_client()
            query_job = client.query(self.query, job_config=self._job_config())
            df = query_job.result().to_dataframe()
        except DataFetchError:
            raise
        except Exception as e:
            error_msg = f"BigQuery query failed: {str(e)}"
            if "Syntax error" in str(e):
                error_msg = f"SQL syntax error in query: {str(e)}"
            elif "Not found" in str(e):
                error_msg = f"Table or dataset not found: {str(e)}"
            elif "Access Denied" in str(e) or "Permission" in str(e):
                error_msg = (
                    f"Permission denied. Check service account permissions: {str(e)}"
                )

            raise DataFetchError(error_msg) from e

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

        logger.debug("Loaded %d rows from BigQuery project %s", len(df), self.project)

        return self._apply_transformers(df, "after")

    def close(self) -> None:
        """
        Close the underlying client. Call this when done with the reader in
        long-running processes.
        """
        if self._client is not None:
            try:
                self._client.close()
            finally:
                self._client = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
