"""
BigQuery data writer implementation.
"""

import logging
import os

import pandas as pd
from typing import Optional, Dict, List, Callable
from google.cloud import bigquery
from google.oauth2 import service_account
from ..base import DataWriter
from spendwatch.shared import DataWriteError, TransformableMixin

logger = logging.getLogger(__name__)


class BigQueryDataWriter(DataWriter, TransformableMixin):
    """
    Data writer implementation for Google BigQuery.

    Args:
        service_account_file: Path to the service account JSON file for authentication
        project: GCP project ID
        dataset: BigQuery dataset name
        table: BigQuery table name
        create_disposition: Behavior if the table doesn't exist
                           (default: CREATE_IF_NEEDED)
        write_disposition: Behavior if the table exists
                          (default: WRITE_APPEND, keeping anomaly history)
        transformers: Optional dict of transformer lists to apply before writing
    """

    CREATE_DISPOSITIONS = {
        "CREATE_IF_NEEDED": bigquery.CreateDisposition.CREATE_IF_NEEDED,
        "CREATE_NEVER": bigquery.CreateDisposition.CREATE_NEVER,
    }
    WRITE_DISPOSITIONS = {
        "WRITE_TRUNCATE": bigquery.WriteDisposition.WRITE_TRUNCATE,
        "WRITE_APPEND": bigquery.WriteDisposition.WRITE_APPEND,
        "WRITE_EMPTY": bigquery.WriteDisposition.WRITE_EMPTY,
    }

    def __init__(
        self,
        service_account_file: str,
        project: str,
        dataset: str,
        table: str,
        create_disposition: str = "CREATE_IF_NEEDED",
        write_disposition: str = "WRITE_APPEND",
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

        for name, value in (("project", project), ("dataset", dataset), ("table", table)):
            if not value or not value.strip():
                raise ValueError(f"'{name}' cannot be empty")
        self.project = project
        self.dataset = dataset
        self.table = table

        if create_disposition not in self.CREATE_DISPOSITIONS:
            raise ValueError(
                f"Invalid create_disposition: '{create_disposition}'. "
                f"Must be one of: {', '.join(sorted(self.CREATE_DISPOSITIONS))}"
            )
        if write_disposition not in self.WRITE_DISPOSITIONS:
            raise ValueError(
                f"Invalid write_disposition: '{write_disposition}'. "
                f"Must be one of: {', '.join(sorted(self.WRITE_DISPOSITIONS))}"
            )

        self.create_disposition = create_disposition
        self.write_disposition = write_disposition
        self._client = None
        self.transformers = transformers or {}

    @property
    def table_id(self) -> str:
        return f"{self.project}.{self.dataset}.{self.table}"

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
                raise DataWriteError(f"Failed to create BigQuery client: {str(e)}") from e

        return self._client

    def write(self, dataframe: pd.DataFrame) -> None:
        """
        Load a DataFrame into the BigQuery table.

        An empty DataFrame after the 'before' transformers is skipped.

        Args:
            dataframe: The data to write

        Raises:
            TypeError: If dataframe is not a DataFrame
            DataWriteError: If the BigQuery load job fails
        """
        if not isinstance(dataframe, pd.DataFrame):
            raise TypeError(
                f"Expected pandas DataFrame, got {type(dataframe).__name__}"
            )

        dataframe = self._apply_transformers(dataframe, "before")

        if dataframe.empty:
            logger.debug("Nothing to write to %s", self.table_id)
            return

        client = self._get_client()

        job_config = bigquery.LoadJobConfig(
            create_disposition=self.CREATE_DISPOSITIONS[self.create_disposition],
            write_disposition=self.WRITE_DISPOSITIONS[self.write_disposition],
        )

        try:
            job = client.load_table_from_dataframe(
                dataframe, self.table_id, job_config=job_config
            )
            job.result()
        except Exception as e:
            raise DataWriteError(
                f"Failed to write to BigQuery table {self.dataset}.{self.table}. "
                f"Error: {str(e)}"
            ) from e

        logger.debug("Wrote %d rows to %s", len(dataframe), self.table_id)

    def close(self) -> None:
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
